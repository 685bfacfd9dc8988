"""Pytest configuration and shared fixtures."""

import hashlib
import hmac
import time
from datetime import datetime, timedelta, timezone

import pytest

from app import create_app
from models import db, Concert, ConcertTranslation, ProgramPiece, ProgramPieceTranslation, Ticket

CONCERT_START = datetime(2026, 5, 1, 19, 0, tzinfo=timezone.utc)
PLAYBACK_URL = 'https://cdn.example.com/live/master.m3u8'
WEBHOOK_SECRET = 'whsec_test_secret'


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': 'test-secret',
        'IDENTITY_TOKEN_SECRET': 'test-identity-secret',
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'STRIPE_SECRET_KEY': '',
        'STRIPE_WEBHOOK_SECRET': WEBHOOK_SECRET,
        'STREAM_PLAYBACK_URL': PLAYBACK_URL,
        'IDENTITY_API_URL': '',
        'SUPPORT_EMAIL': '',
        'MAIL_SERVER': '',
    })
    with app.app_context():
        db.create_all()
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


def sign_in(client, user_id, role=None):
    with client.session_transaction() as sess:
        sess['user_id'] = user_id
        if role:
            sess['role'] = role


@pytest.fixture
def make_concert(app):
    def _make(start=CONCERT_START, visible=True, stream_url=None, price_id='price_123',
              locales=('sl', 'en')):
        with app.app_context():
            concert = Concert(date=start, image='', is_visible=visible, stream_url=stream_url,
                              stripe_price_id=price_id)
            concert.translations = [
                ConcertTranslation(locale=locale, title=f'Recital ({locale})', venue='Main Hall',
                                   performer='String Trio', description='')
                for locale in locales
            ]
            concert.program = [ProgramPiece(order=0, translations=[
                ProgramPieceTranslation(locale='sl', title='Sonata v A-duru', composer='Mozart'),
                ProgramPieceTranslation(locale='original', title='Sonate A-Dur', composer='Mozart'),
            ])]
            db.session.add(concert)
            db.session.commit()
            return concert.id
    return _make


@pytest.fixture
def make_ticket(app):
    def _make(user_id, concert_id, status='paid', payment_intent_id=None):
        with app.app_context():
            ticket = Ticket(user_id=user_id, concert_id=concert_id, status=status,
                            stripe_payment_intent_id=payment_intent_id)
            db.session.add(ticket)
            db.session.commit()
            return ticket.id
    return _make


@pytest.fixture
def freeze_now(monkeypatch):
    """Pin the clock the HTTP handlers see"""
    def _freeze(now):
        import routes.concerts
        monkeypatch.setattr(routes.concerts, 'utc_now', lambda: now)
    return _freeze


class FakeResponse:
    """Stand-in for a streamed requests.Response"""

    def __init__(self, status_code=200, content_type='application/vnd.apple.mpegurl',
                 body=b'#EXTM3U\n#EXT-X-VERSION:3\n'):
        self.status_code = status_code
        self.headers = {'Content-Type': content_type} if content_type else {}
        self.body = body

    @property
    def ok(self):
        return self.status_code < 400

    def iter_content(self, chunk_size=1):
        for start in range(0, len(self.body), chunk_size):
            yield self.body[start:start + chunk_size]

    def __enter__(self):
        return self

    def __exit__(self, *exc):
        return False


@pytest.fixture
def playlist(monkeypatch):
    """Make the playback origin answer with the given response (or raise it)"""
    calls = []

    def _serve(response):
        def fake_get(url, **kwargs):
            calls.append((url, kwargs))
            if isinstance(response, Exception):
                raise response
            return response
        monkeypatch.setattr('services.stream_probe.requests.get', fake_get)
        return calls
    return _serve


def stripe_signature(payload, secret=WEBHOOK_SECRET, timestamp=None):
    timestamp = timestamp or int(time.time())
    signed = hmac.new(secret.encode(), f"{timestamp}.{payload}".encode(), hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={signed}"


def minutes(n):
    return timedelta(minutes=n)
