import stripe
from flask import current_app

PLACEHOLDER_SECRET_KEY = 'your-stripe-secret-key'


class PaymentsNotConfigured(Exception):
    pass


class InvalidWebhook(Exception):
    """Webhook payload that failed signature verification or parsing."""

    def __init__(self, code, message):
        super().__init__(message)
        self.code = code


def payments_configured():
    secret_key = current_app.config.get('STRIPE_SECRET_KEY')
    return bool(secret_key) and secret_key != PLACEHOLDER_SECRET_KEY


def _require_stripe():
    if not payments_configured():
        raise PaymentsNotConfigured("STRIPE_SECRET_KEY is not set")
    stripe.api_key = current_app.config['STRIPE_SECRET_KEY']


def create_checkout_session(concert, user_id, success_url=None, cancel_url=None):
    """Create a Stripe Checkout session for one ticket to a concert"""
    _require_stripe()

    base_url = current_app.config['BASE_URL'].rstrip('/')
    print(f"[Stripe] Creating checkout session for concert {concert.id}, user {user_id}")

    checkout_session = stripe.checkout.Session.create(
        mode='payment',
        line_items=[{'price': concert.stripe_price_id, 'quantity': 1}],
        success_url=success_url or f"{base_url}/success?concertId={concert.id}",
        cancel_url=cancel_url or f"{base_url}/cancel?concertId={concert.id}",
        metadata={
            'concertId': str(concert.id),
            'userId': user_id,
            'productId': concert.stripe_product_id or ''
        }
    )

    print(f"[Stripe] Checkout session created: {checkout_session.id}")
    return checkout_session


def retrieve_checkout_session(session_id):
    _require_stripe()
    return stripe.checkout.Session.retrieve(session_id)


def checkout_session_is_paid(checkout_session):
    return checkout_session.payment_status == 'paid' or checkout_session.status == 'complete'


def verify_webhook(payload, sig_header):
    """Verify a Stripe webhook signature and return the stripe.Event.

    Nothing in the payload is trusted before the signature checks out.
    """
    webhook_secret = current_app.config.get('STRIPE_WEBHOOK_SECRET')
    if not sig_header or not webhook_secret:
        raise InvalidWebhook('invalid_signature', 'Missing signature or secret')

    try:
        return stripe.Webhook.construct_event(payload, sig_header, webhook_secret)
    except ValueError:
        raise InvalidWebhook('invalid_payload', 'Invalid payload')
    except stripe.SignatureVerificationError:
        raise InvalidWebhook('invalid_signature', 'Invalid signature')
