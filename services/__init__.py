from .auth import Identity, current_identity, login_required, admin_required
from .entitlement import AccessDecision, DenialReason, can_access_stream
from .stream_probe import probe_availability, playback_url_for
from .viewing_window import is_within_window, has_ended

__all__ = ['Identity', 'current_identity', 'login_required', 'admin_required',
           'AccessDecision', 'DenialReason', 'can_access_stream',
           'probe_availability', 'playback_url_for', 'is_within_window', 'has_ended']
