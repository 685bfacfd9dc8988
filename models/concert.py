from utils.helpers import utc_now
from .database import db


class Concert(db.Model):
    """Database model for a streamed concert."""
    __tablename__ = 'concert'

    id = db.Column(db.Integer, primary_key=True)
    date = db.Column(db.DateTime(timezone=True), nullable=False)  # Scheduled start, UTC
    image = db.Column(db.String(500), nullable=False, default='')
    stream_url = db.Column(db.String(500))  # Overrides STREAM_PLAYBACK_URL when set
    is_visible = db.Column(db.Boolean, nullable=False, default=True)

    # Stripe catalog references
    stripe_product_id = db.Column(db.String(100))
    stripe_price_id = db.Column(db.String(100))

    # Timestamps
    created_at = db.Column(db.DateTime(timezone=True), default=utc_now)
    updated_at = db.Column(db.DateTime(timezone=True), default=utc_now, onupdate=utc_now)

    # Owned rows go away with the concert; tickets are kept as audit trail
    translations = db.relationship('ConcertTranslation', backref='concert', lazy=True,
                                   cascade='all, delete-orphan')
    program = db.relationship('ProgramPiece', backref='concert', lazy=True,
                              cascade='all, delete-orphan',
                              order_by='ProgramPiece.order')

    def translation_for(self, locale):
        for translation in self.translations:
            if translation.locale == locale:
                return translation
        return None


class ConcertTranslation(db.Model):
    """Localized texts for a concert, one row per locale."""
    __tablename__ = 'concert_translation'
    __table_args__ = (db.UniqueConstraint('concert_id', 'locale'),)

    id = db.Column(db.Integer, primary_key=True)
    concert_id = db.Column(db.Integer, db.ForeignKey('concert.id', ondelete='CASCADE'),
                           nullable=False)
    locale = db.Column(db.String(10), nullable=False)
    title = db.Column(db.String(255), nullable=False)
    subtitle = db.Column(db.String(255))
    venue = db.Column(db.String(255), nullable=False)
    performer = db.Column(db.String(255), nullable=False)
    description = db.Column(db.Text, nullable=False, default='')
    performer_details = db.Column(db.Text)


class ProgramPiece(db.Model):
    """A single piece on a concert's program."""
    __tablename__ = 'program_piece'

    id = db.Column(db.Integer, primary_key=True)
    concert_id = db.Column(db.Integer, db.ForeignKey('concert.id', ondelete='CASCADE'),
                           nullable=False)
    order = db.Column(db.Integer, nullable=False)

    translations = db.relationship('ProgramPieceTranslation', backref='piece', lazy=True,
                                   cascade='all, delete-orphan')

    def translation_for(self, *locales):
        """First translation matching the given locales, in preference order"""
        for locale in locales:
            for translation in self.translations:
                if translation.locale == locale:
                    return translation
        return self.translations[0] if self.translations else None


class ProgramPieceTranslation(db.Model):
    __tablename__ = 'program_piece_translation'
    __table_args__ = (db.UniqueConstraint('piece_id', 'locale'),)

    id = db.Column(db.Integer, primary_key=True)
    piece_id = db.Column(db.Integer, db.ForeignKey('program_piece.id', ondelete='CASCADE'),
                         nullable=False)
    locale = db.Column(db.String(10), nullable=False)  # 'sl' or 'original'
    title = db.Column(db.String(255), nullable=False, default='')
    composer = db.Column(db.String(255), nullable=False, default='')
