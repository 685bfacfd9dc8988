import stripe
from flask import Blueprint, request, jsonify
from models import db, Concert
from services import current_identity, login_required
from services.auth import error_response
from services.entitlement import find_concert, user_has_paid_ticket
from services.payment import (PaymentsNotConfigured, InvalidWebhook, create_checkout_session,
                              retrieve_checkout_session, checkout_session_is_paid, verify_webhook)
from services.tickets import create_pending_ticket, get_ticket, mark_ticket_paid

purchase_bp = Blueprint('purchase', __name__, url_prefix='/api')


def _concert_id(value):
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


@purchase_bp.route('/checkout', methods=['POST'])
@login_required
def checkout():
    """Start a Stripe Checkout session for a concert ticket"""
    identity = current_identity()
    body = request.get_json(silent=True) or {}
    concert_id = _concert_id(body.get('concertId'))
    if concert_id is None:
        return error_response('invalid_request', 'concertId is required', 400)

    concert = find_concert(identity, concert_id)
    if concert is None or not concert.is_visible:
        return error_response('not_found', 'Concert not found', 404)

    existing = get_ticket(identity.user_id, concert.id)
    if existing and existing.is_paid:
        return jsonify({'alreadyOwned': True})

    if not concert.stripe_price_id:
        return error_response('not_purchasable', 'Concert is not purchasable yet', 400)

    try:
        checkout_session = create_checkout_session(
            concert, identity.user_id,
            success_url=body.get('successUrl'),
            cancel_url=body.get('cancelUrl')
        )
    except PaymentsNotConfigured:
        return error_response('payments_not_configured', 'Payments are not configured', 503)
    except stripe.StripeError as e:
        print(f"[Stripe] Error creating checkout session: {e}")
        return error_response('checkout_failed', 'Failed to create checkout session', 502)

    create_pending_ticket(identity.user_id, concert.id, checkout_session.id)
    return jsonify({'id': checkout_session.id, 'url': checkout_session.url})


def reconcile_checkout_session(user_id, concert_id, session_id):
    """Mark the ticket paid if the given Checkout session says so"""
    try:
        checkout_session = retrieve_checkout_session(session_id)
    except (PaymentsNotConfigured, stripe.StripeError) as e:
        print(f"[Purchase] Session verify failed for {session_id}: {e}")
        return

    metadata = checkout_session.metadata or {}
    if metadata.get('userId') != user_id or _concert_id(metadata.get('concertId')) != concert_id:
        print(f"[Purchase] Session {session_id} does not belong to {user_id}/{concert_id}")
        return

    if checkout_session_is_paid(checkout_session):
        mark_ticket_paid(
            user_id, concert_id,
            checkout_session_id=checkout_session.id,
            payment_intent_id=checkout_session.payment_intent,
            amount_cents=checkout_session.amount_total,
            currency=checkout_session.currency
        )


@purchase_bp.route('/purchase', methods=['GET'])
def purchase_status():
    """Does the current user own a paid ticket for the concert?"""
    concert_id = _concert_id(request.args.get('concertId'))
    if concert_id is None:
        return error_response('invalid_request', 'concertId required', 400)

    identity = current_identity()
    if not identity.is_authenticated:
        return jsonify({'purchased': False, 'requiresAuth': True})

    session_id = request.args.get('sessionId')
    if session_id and db.session.get(Concert, concert_id) is not None:
        reconcile_checkout_session(identity.user_id, concert_id, session_id)

    return jsonify({'purchased': user_has_paid_ticket(identity.user_id, concert_id)})


@purchase_bp.route('/stripe/webhook', methods=['POST'])
def stripe_webhook():
    """Handle Stripe payment webhooks"""
    payload = request.get_data(as_text=True)
    sig_header = request.headers.get('Stripe-Signature')

    try:
        event = verify_webhook(payload, sig_header)
    except InvalidWebhook as e:
        print(f"[Stripe Webhook] Rejected: {e}")
        return error_response(e.code, str(e), 400)

    if event['type'] != 'checkout.session.completed':
        return jsonify({'received': True})

    checkout_session = event['data']['object']
    metadata = checkout_session.get('metadata') or {}
    user_id = metadata.get('userId')
    concert_id = _concert_id(metadata.get('concertId'))

    if not user_id or concert_id is None:
        print("[Stripe Webhook] No userId/concertId in session metadata")
        return jsonify({'received': True})

    if db.session.get(Concert, concert_id) is None:
        print(f"[Stripe Webhook] Concert {concert_id} not found")
        return jsonify({'received': True})

    try:
        mark_ticket_paid(
            user_id, concert_id,
            checkout_session_id=checkout_session.get('id'),
            payment_intent_id=checkout_session.get('payment_intent'),
            amount_cents=checkout_session.get('amount_total'),
            currency=checkout_session.get('currency')
        )
    except Exception as e:
        db.session.rollback()
        print(f"[Stripe Webhook] Handler error: {e}")
        return jsonify({'received': True, 'error': 'handler_error'}), 500

    print(f"[Stripe Webhook] Payment confirmed for concert {concert_id}, user {user_id}")
    return jsonify({'received': True})
