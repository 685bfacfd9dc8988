from dataclasses import dataclass
from functools import wraps

import requests
from flask import current_app, g, jsonify, session
from itsdangerous import BadSignature, URLSafeTimedSerializer

ADMIN_ROLE = 'admin'
SESSION_TOKEN_SALT = 'identity-session'
SESSION_TOKEN_MAX_AGE = 300  # seconds


@dataclass(frozen=True)
class Identity:
    """Who is making the request, resolved once per request."""
    user_id: str = None
    is_admin: bool = False
    email: str = None

    @property
    def is_authenticated(self):
        return bool(self.user_id)


ANONYMOUS = Identity()


def get_serializer():
    return URLSafeTimedSerializer(current_app.config['IDENTITY_TOKEN_SECRET'])


def verify_session_token(token, max_age=SESSION_TOKEN_MAX_AGE):
    """Decode a sign-in token handed over by the identity provider"""
    try:
        claims = get_serializer().loads(token, salt=SESSION_TOKEN_SALT, max_age=max_age)
    except BadSignature:
        return None
    if not isinstance(claims, dict) or not claims.get('sub'):
        return None
    return claims


def fetch_role(user_id):
    """Look up a user's role with the identity provider.

    Returns None when the provider is not configured or cannot be reached,
    so callers fall back to ticket-based access.
    """
    api_url = current_app.config.get('IDENTITY_API_URL')
    if not api_url:
        return None

    try:
        response = requests.get(
            f"{api_url.rstrip('/')}/users/{user_id}",
            headers={'Authorization': f"Bearer {current_app.config.get('IDENTITY_API_KEY', '')}"},
            timeout=current_app.config.get('IDENTITY_TIMEOUT', 3)
        )
        response.raise_for_status()
        user = response.json()
    except (requests.RequestException, ValueError) as e:
        print(f"[Identity] Role lookup failed for {user_id}: {e}")
        return None

    if not isinstance(user, dict):
        return None
    for key in ('public_metadata', 'metadata'):
        metadata = user.get(key)
        if isinstance(metadata, dict) and metadata.get('role'):
            return metadata['role']
    return None


def resolve_identity():
    """Build the Identity for the current session"""
    user_id = session.get('user_id')
    if not user_id:
        return ANONYMOUS

    # Role claim from the sign-in token wins; otherwise ask the provider
    role = session.get('role')
    if role is None:
        role = fetch_role(user_id)

    return Identity(user_id=user_id, is_admin=(role == ADMIN_ROLE), email=session.get('email'))


def current_identity():
    if 'identity' not in g:
        g.identity = resolve_identity()
    return g.identity


def error_response(code, message, status):
    return jsonify({'error': code, 'message': message}), status


def login_required(f):
    """Decorator to require a signed-in user"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        if not current_identity().is_authenticated:
            return error_response('authentication_required', 'Authentication required', 401)
        return f(*args, **kwargs)
    return decorated_function


def admin_required(f):
    """Decorator to require the admin role"""
    @wraps(f)
    def decorated_function(*args, **kwargs):
        identity = current_identity()
        if not identity.is_authenticated:
            return error_response('authentication_required', 'Authentication required', 401)
        if not identity.is_admin:
            return error_response('admin_required', 'Admin access required', 403)
        return f(*args, **kwargs)
    return decorated_function
