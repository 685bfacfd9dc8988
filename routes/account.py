from flask import Blueprint, request, jsonify, session
from services import current_identity, login_required
from services.auth import error_response, verify_session_token
from services.tickets import paid_tickets_for_user
from utils import as_utc, isoformat, utc_now

account_bp = Blueprint('account', __name__)


@account_bp.route('/auth/session', methods=['POST'])
def sign_in():
    """Exchange the identity provider's sign-in token for a session"""
    body = request.get_json(silent=True) or {}
    token = body.get('token') or request.form.get('token')
    claims = verify_session_token(token) if token else None
    if claims is None:
        return error_response('invalid_token', 'Invalid or expired sign-in token', 401)

    session.clear()
    session['user_id'] = claims['sub']
    if claims.get('email'):
        session['email'] = claims['email']
    # Without a role claim the role is looked up with the provider per request
    if claims.get('role'):
        session['role'] = claims['role']

    return jsonify({'userId': claims['sub']})


@account_bp.route('/auth/logout', methods=['POST'])
def logout():
    session.clear()
    return jsonify({'ok': True})


@account_bp.route('/api/me/tickets')
@login_required
def my_tickets():
    """Paid tickets of the current user, optionally only past or upcoming concerts"""
    locale = (request.args.get('locale') or 'en').lower()
    when = (request.args.get('when') or 'all').lower()
    now = utc_now()

    items = []
    for ticket in paid_tickets_for_user(current_identity().user_id):
        concert = ticket.concert
        starts_at = as_utc(concert.date)
        if when == 'past' and starts_at >= now:
            continue
        if when == 'upcoming' and starts_at < now:
            continue

        translation = concert.translation_for(locale)
        items.append({
            'ticketId': ticket.id,
            'concertId': concert.id,
            'date': isoformat(concert.date),
            'title': translation.title if translation else '',
            'subtitle': translation.subtitle if translation else None,
            'venue': translation.venue if translation else '',
            'amountCents': ticket.amount_cents,
            'currency': ticket.currency,
            'stripePaymentIntentId': ticket.stripe_payment_intent_id,
            'stripeCheckoutSessionId': ticket.stripe_checkout_session_id,
            'purchasedAt': isoformat(ticket.paid_at or ticket.created_at)
        })

    return jsonify({'items': items})
