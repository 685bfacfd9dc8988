from sqlalchemy.exc import IntegrityError

from models import db, Ticket
from models.ticket import STATUS_PAID, STATUS_PENDING
from utils.helpers import utc_now


def get_ticket(user_id, concert_id):
    return Ticket.query.filter_by(user_id=user_id, concert_id=concert_id).first()


def _insert_or_existing(ticket):
    """Insert a new ticket; if another request won the race, return its row instead"""
    db.session.add(ticket)
    try:
        db.session.commit()
        return ticket, True
    except IntegrityError:
        db.session.rollback()
        return get_ticket(ticket.user_id, ticket.concert_id), False


def create_pending_ticket(user_id, concert_id, checkout_session_id):
    """Record a started checkout. Paid tickets are never moved back to pending."""
    ticket = get_ticket(user_id, concert_id)
    if ticket is None:
        ticket, created = _insert_or_existing(Ticket(
            user_id=user_id,
            concert_id=concert_id,
            status=STATUS_PENDING,
            stripe_checkout_session_id=checkout_session_id
        ))
        if created:
            return ticket

    if ticket.status != STATUS_PAID:
        ticket.stripe_checkout_session_id = checkout_session_id
        db.session.commit()
    return ticket


def mark_ticket_paid(user_id, concert_id, checkout_session_id=None, payment_intent_id=None,
                     amount_cents=None, currency=None):
    """Mark the (user, concert) ticket paid, creating it if needed.

    Safe to call repeatedly for the same payment: the unique (user, concert)
    pair keeps it to one row and a repeat with the same references is a no-op.
    """
    ticket = get_ticket(user_id, concert_id)
    if ticket is None:
        ticket, created = _insert_or_existing(Ticket(
            user_id=user_id,
            concert_id=concert_id,
            status=STATUS_PAID,
            amount_cents=amount_cents or 0,
            currency=currency or 'eur',
            stripe_checkout_session_id=checkout_session_id,
            stripe_payment_intent_id=payment_intent_id,
            paid_at=utc_now()
        ))
        if created:
            print(f"[Tickets] Ticket for concert {concert_id} created as paid for {user_id}")
            return ticket

    if (ticket.status == STATUS_PAID
            and (not payment_intent_id or ticket.stripe_payment_intent_id == payment_intent_id)
            and (not checkout_session_id or ticket.stripe_checkout_session_id == checkout_session_id)):
        return ticket

    if ticket.status != STATUS_PAID:
        ticket.paid_at = utc_now()
    ticket.status = STATUS_PAID
    if amount_cents:
        ticket.amount_cents = amount_cents
    if currency:
        ticket.currency = currency
    ticket.stripe_checkout_session_id = checkout_session_id or ticket.stripe_checkout_session_id
    ticket.stripe_payment_intent_id = payment_intent_id or ticket.stripe_payment_intent_id
    db.session.commit()

    print(f"[Tickets] Ticket {ticket.id} marked paid for {user_id}")
    return ticket


def paid_tickets_for_user(user_id):
    return (Ticket.query.filter_by(user_id=user_id, status=STATUS_PAID)
            .order_by(Ticket.created_at.desc())
            .all())
