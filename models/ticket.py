from utils.helpers import utc_now
from .database import db

STATUS_PENDING = 'pending'
STATUS_PAID = 'paid'


class Ticket(db.Model):
    """Entitlement record: a user's ticket for one concert's stream."""
    __tablename__ = 'ticket'
    __table_args__ = (db.UniqueConstraint('user_id', 'concert_id', name='uq_ticket_user_concert'),)

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.String(100), nullable=False, index=True)  # Identity provider subject
    concert_id = db.Column(db.Integer, db.ForeignKey('concert.id'), nullable=False)

    # Status tracking
    status = db.Column(db.String(20), nullable=False, default=STATUS_PENDING)  # pending, paid
    amount_cents = db.Column(db.Integer, nullable=False, default=0)
    currency = db.Column(db.String(3), nullable=False, default='eur')

    # Stripe references
    stripe_checkout_session_id = db.Column(db.String(255))
    stripe_payment_intent_id = db.Column(db.String(255))

    # Timestamps
    created_at = db.Column(db.DateTime(timezone=True), default=utc_now)
    updated_at = db.Column(db.DateTime(timezone=True), default=utc_now, onupdate=utc_now)
    paid_at = db.Column(db.DateTime(timezone=True))

    concert = db.relationship('Concert', backref=db.backref('tickets', lazy=True,
                                                           passive_deletes='all'))

    @property
    def is_paid(self):
        return self.status == STATUS_PAID
