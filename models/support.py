from utils.helpers import utc_now
from .database import db

STATUS_OPEN = 'open'
STATUS_RESOLVED = 'resolved'


class SupportReport(db.Model):
    """User-submitted diagnostic report about stream access."""
    __tablename__ = 'support_report'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False)
    type = db.Column(db.String(50), nullable=False, default='access')
    message = db.Column(db.Text)
    concert_id = db.Column(db.Integer, nullable=False, index=True)
    locale = db.Column(db.String(10))

    # What the player saw when the report was filed
    is_live = db.Column(db.Boolean, nullable=False, default=False)
    ever_live = db.Column(db.Boolean, nullable=False, default=False)
    window_open = db.Column(db.Boolean, nullable=False, default=False)
    purchased = db.Column(db.Boolean)  # None when the client did not know

    user_agent = db.Column(db.String(500))
    user_id = db.Column(db.String(100))

    status = db.Column(db.String(20), nullable=False, default=STATUS_OPEN)  # open, resolved
    created_at = db.Column(db.DateTime(timezone=True), default=utc_now)
    resolved_at = db.Column(db.DateTime(timezone=True))
