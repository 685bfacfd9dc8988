"""Integration tests for checkout, purchase status and the Stripe webhook.

Run with: pytest tests/test_purchase.py -v
"""

import json
from types import SimpleNamespace

import pytest
import stripe

from conftest import stripe_signature, sign_in
from models import Ticket
from services.payment import InvalidWebhook, verify_webhook


def completed_event(concert_id, user_id='user_1', payment_intent='pi_1', session_id='cs_1'):
    return json.dumps({
        'id': 'evt_1',
        'type': 'checkout.session.completed',
        'data': {'object': {
            'id': session_id,
            'object': 'checkout.session',
            'payment_intent': payment_intent,
            'amount_total': 1500,
            'currency': 'eur',
            'metadata': {'concertId': str(concert_id), 'userId': user_id}
        }}
    })


def post_webhook(client, payload, signature):
    headers = {'Stripe-Signature': signature} if signature else {}
    return client.post('/api/stripe/webhook', data=payload, headers=headers,
                       content_type='application/json')


def tickets(app):
    with app.app_context():
        return [(t.user_id, t.concert_id, t.status, t.stripe_payment_intent_id)
                for t in Ticket.query.all()]


class TestStripeWebhook:
    """Tests for POST /api/stripe/webhook"""

    def test_valid_event_marks_ticket_paid(self, app, client, make_concert):
        concert_id = make_concert()
        payload = completed_event(concert_id)

        response = post_webhook(client, payload, stripe_signature(payload))
        assert response.status_code == 200
        assert response.get_json() == {'received': True}
        assert tickets(app) == [('user_1', concert_id, 'paid', 'pi_1')]

    def test_redelivered_event_keeps_one_row(self, app, client, make_concert):
        concert_id = make_concert()
        payload = completed_event(concert_id)

        post_webhook(client, payload, stripe_signature(payload))
        post_webhook(client, payload, stripe_signature(payload))
        assert tickets(app) == [('user_1', concert_id, 'paid', 'pi_1')]

    def test_pending_ticket_is_upgraded(self, app, client, make_concert, make_ticket):
        concert_id = make_concert()
        make_ticket('user_1', concert_id, status='pending')
        payload = completed_event(concert_id)

        post_webhook(client, payload, stripe_signature(payload))
        assert tickets(app) == [('user_1', concert_id, 'paid', 'pi_1')]

    def test_invalid_signature_is_rejected_without_changes(self, app, client, make_concert, make_ticket):
        concert_id = make_concert()
        make_ticket('user_1', concert_id, status='pending')
        payload = completed_event(concert_id)

        response = post_webhook(client, payload, stripe_signature(payload, secret='whsec_wrong'))
        assert response.status_code == 400
        assert response.get_json()['error'] == 'invalid_signature'
        assert tickets(app) == [('user_1', concert_id, 'pending', None)]

    def test_invalid_signature_creates_nothing(self, app, client, make_concert):
        concert_id = make_concert()
        payload = completed_event(concert_id)

        response = post_webhook(client, payload, 't=1,v1=deadbeef')
        assert response.status_code == 400
        assert tickets(app) == []

    def test_missing_signature_is_rejected(self, app, client, make_concert):
        concert_id = make_concert()
        response = post_webhook(client, completed_event(concert_id), None)
        assert response.status_code == 400
        assert tickets(app) == []

    def test_tampered_payload_is_rejected(self, app, client, make_concert):
        concert_id = make_concert()
        signature = stripe_signature(completed_event(concert_id, user_id='user_1'))

        response = post_webhook(client, completed_event(concert_id, user_id='user_2'), signature)
        assert response.status_code == 400
        assert tickets(app) == []

    def test_signed_malformed_payload_is_rejected(self, app, client):
        payload = '{"id": "evt_bad", "type":'
        response = post_webhook(client, payload, stripe_signature(payload))
        assert response.status_code == 400
        assert response.get_json()['error'] == 'invalid_payload'
        assert tickets(app) == []

    def test_other_event_types_are_acknowledged(self, app, client):
        payload = json.dumps({'id': 'evt_2', 'type': 'invoice.paid', 'data': {'object': {}}})
        response = post_webhook(client, payload, stripe_signature(payload))
        assert response.status_code == 200
        assert tickets(app) == []

    def test_event_without_metadata_is_ignored(self, app, client):
        payload = json.dumps({'id': 'evt_3', 'type': 'checkout.session.completed',
                              'data': {'object': {'id': 'cs_9', 'metadata': {}}}})
        response = post_webhook(client, payload, stripe_signature(payload))
        assert response.status_code == 200
        assert tickets(app) == []


class TestVerifyWebhook:
    """Tests for verify_webhook"""

    def test_returns_stripe_event(self, app_ctx):
        payload = completed_event(7)
        event = verify_webhook(payload, stripe_signature(payload))
        assert isinstance(event, stripe.Event)
        assert event['type'] == 'checkout.session.completed'
        assert event['data']['object']['metadata']['userId'] == 'user_1'

    def test_missing_secret_is_rejected(self, app_ctx):
        app_ctx.config['STRIPE_WEBHOOK_SECRET'] = ''
        payload = completed_event(7)
        with pytest.raises(InvalidWebhook) as excinfo:
            verify_webhook(payload, stripe_signature(payload))
        assert excinfo.value.code == 'invalid_signature'

    def test_stale_signature_is_rejected(self, app_ctx):
        payload = completed_event(7)
        with pytest.raises(InvalidWebhook) as excinfo:
            verify_webhook(payload, stripe_signature(payload, timestamp=1_000_000))
        assert excinfo.value.code == 'invalid_signature'


@pytest.fixture
def stripe_enabled(app):
    app.config['STRIPE_SECRET_KEY'] = 'sk_test_123'


class TestCheckout:
    """Tests for POST /api/checkout"""

    def test_requires_authentication(self, client, make_concert):
        concert_id = make_concert()
        response = client.post('/api/checkout', json={'concertId': concert_id})
        assert response.status_code == 401

    def test_creates_session_and_pending_ticket(self, app, client, make_concert, stripe_enabled, monkeypatch):
        concert_id = make_concert()
        created = []

        def fake_create(**kwargs):
            created.append(kwargs)
            return SimpleNamespace(id='cs_new', url='https://checkout.stripe.com/c/cs_new')

        monkeypatch.setattr(stripe.checkout.Session, 'create', fake_create)
        sign_in(client, 'user_1')

        response = client.post('/api/checkout', json={'concertId': concert_id})
        assert response.status_code == 200
        assert response.get_json() == {'id': 'cs_new', 'url': 'https://checkout.stripe.com/c/cs_new'}
        assert created[0]['line_items'] == [{'price': 'price_123', 'quantity': 1}]
        assert created[0]['metadata']['userId'] == 'user_1'
        assert created[0]['metadata']['concertId'] == str(concert_id)
        assert tickets(app) == [('user_1', concert_id, 'pending', None)]

    def test_already_owned(self, client, make_concert, make_ticket, stripe_enabled):
        concert_id = make_concert()
        make_ticket('user_1', concert_id)
        sign_in(client, 'user_1')

        response = client.post('/api/checkout', json={'concertId': concert_id})
        assert response.get_json() == {'alreadyOwned': True}

    def test_concert_without_price(self, client, make_concert, stripe_enabled):
        concert_id = make_concert(price_id=None)
        sign_in(client, 'user_1')

        response = client.post('/api/checkout', json={'concertId': concert_id})
        assert response.status_code == 400
        assert response.get_json()['error'] == 'not_purchasable'

    def test_draft_concert_cannot_be_bought(self, client, make_concert, stripe_enabled):
        concert_id = make_concert(visible=False)
        sign_in(client, 'user_1')

        response = client.post('/api/checkout', json={'concertId': concert_id})
        assert response.status_code == 404

    def test_payments_not_configured(self, client, make_concert):
        concert_id = make_concert()
        sign_in(client, 'user_1')

        response = client.post('/api/checkout', json={'concertId': concert_id})
        assert response.status_code == 503
        assert response.get_json()['error'] == 'payments_not_configured'


class TestPurchaseStatus:
    """Tests for GET /api/purchase"""

    def test_requires_concert_id(self, client):
        response = client.get('/api/purchase')
        assert response.status_code == 400

    def test_anonymous(self, client, make_concert):
        concert_id = make_concert()
        response = client.get(f'/api/purchase?concertId={concert_id}')
        assert response.get_json() == {'purchased': False, 'requiresAuth': True}

    def test_paid_ticket(self, client, make_concert, make_ticket):
        concert_id = make_concert()
        make_ticket('user_1', concert_id)
        sign_in(client, 'user_1')

        response = client.get(f'/api/purchase?concertId={concert_id}')
        assert response.get_json() == {'purchased': True}

    def test_session_reconciliation_marks_paid(self, app, client, make_concert, make_ticket,
                                               stripe_enabled, monkeypatch):
        concert_id = make_concert()
        make_ticket('user_1', concert_id, status='pending')
        checkout_session = SimpleNamespace(
            id='cs_1', payment_status='paid', status='complete', payment_intent='pi_1',
            amount_total=1500, currency='eur',
            metadata={'userId': 'user_1', 'concertId': str(concert_id)}
        )
        monkeypatch.setattr(stripe.checkout.Session, 'retrieve', lambda session_id: checkout_session)
        sign_in(client, 'user_1')

        response = client.get(f'/api/purchase?concertId={concert_id}&sessionId=cs_1')
        assert response.get_json() == {'purchased': True}
        assert tickets(app) == [('user_1', concert_id, 'paid', 'pi_1')]

    def test_session_of_another_user_is_ignored(self, app, client, make_concert, make_ticket,
                                                stripe_enabled, monkeypatch):
        concert_id = make_concert()
        make_ticket('user_1', concert_id, status='pending')
        checkout_session = SimpleNamespace(
            id='cs_2', payment_status='paid', status='complete', payment_intent='pi_2',
            amount_total=1500, currency='eur',
            metadata={'userId': 'user_2', 'concertId': str(concert_id)}
        )
        monkeypatch.setattr(stripe.checkout.Session, 'retrieve', lambda session_id: checkout_session)
        sign_in(client, 'user_1')

        response = client.get(f'/api/purchase?concertId={concert_id}&sessionId=cs_2')
        assert response.get_json() == {'purchased': False}
        assert tickets(app) == [('user_1', concert_id, 'pending', None)]

    def test_stripe_failure_still_answers(self, client, make_concert, stripe_enabled, monkeypatch):
        concert_id = make_concert()

        def failing_retrieve(session_id):
            raise stripe.APIConnectionError('network down')

        monkeypatch.setattr(stripe.checkout.Session, 'retrieve', failing_retrieve)
        sign_in(client, 'user_1')

        response = client.get(f'/api/purchase?concertId={concert_id}&sessionId=cs_1')
        assert response.status_code == 200
        assert response.get_json() == {'purchased': False}
