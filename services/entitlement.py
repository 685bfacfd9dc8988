"""
Who may watch a concert's stream.

Access to a published concert is granted to administrators and to
holders of a paid ticket.
Everything here is read-only.
"""
from dataclasses import dataclass
from enum import Enum

from models import db, Concert, Ticket
from models.ticket import STATUS_PAID


class DenialReason(Enum):
    AUTHENTICATION_REQUIRED = 'authentication_required'
    NOT_FOUND = 'not_found'
    PURCHASE_REQUIRED = 'purchase_required'


@dataclass(frozen=True)
class AccessDecision:
    allowed: bool
    reason: DenialReason = None
    concert: Concert = None

    @classmethod
    def allow(cls, concert):
        return cls(allowed=True, concert=concert)

    @classmethod
    def deny(cls, reason, concert=None):
        return cls(allowed=False, reason=reason, concert=concert)


def find_concert(identity, concert_id):
    """Load a concert the identity is allowed to know about.

    Drafts only exist for administrators.
    """
    concert = db.session.get(Concert, concert_id)
    if concert is None:
        return None
    if not concert.is_visible and not identity.is_admin:
        return None
    return concert


def user_has_paid_ticket(user_id, concert_id):
    ticket = Ticket.query.filter_by(user_id=user_id, concert_id=concert_id).first()
    return ticket is not None and ticket.status == STATUS_PAID


def can_access_stream(identity, concert_id):
    if not identity.is_authenticated:
        return AccessDecision.deny(DenialReason.AUTHENTICATION_REQUIRED)

    # Unpublished concerts have no stream, not even for administrators
    concert = db.session.get(Concert, concert_id)
    if concert is None or not concert.is_visible:
        return AccessDecision.deny(DenialReason.NOT_FOUND)

    if identity.is_admin:
        return AccessDecision.allow(concert)

    if user_has_paid_ticket(identity.user_id, concert.id):
        return AccessDecision.allow(concert)

    return AccessDecision.deny(DenialReason.PURCHASE_REQUIRED, concert)
