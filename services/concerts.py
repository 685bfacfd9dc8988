"""
Concert catalog: validation of admin edits and localized serialization.

Edits always replace the whole concert (date, visibility, translations and
program); nothing is patched field by field.
"""
from models import db, Concert, ConcertTranslation, ProgramPiece, ProgramPieceTranslation
from utils.helpers import isoformat, parse_iso_datetime

PROGRAM_LOCALES = ('sl', 'original')


class ValidationError(Exception):
    pass


def _text(value):
    return (value or '').strip() if isinstance(value, str) else ''


def clean_translations(translations):
    """Drop blank locales and check the remaining ones are complete"""
    if not isinstance(translations, list):
        raise ValidationError("Missing required fields: date and translations are required")

    cleaned = []
    for translation in translations:
        if not isinstance(translation, dict):
            continue
        row = {
            'locale': _text(translation.get('locale')),
            'title': _text(translation.get('title')),
            'subtitle': _text(translation.get('subtitle')) or None,
            'venue': _text(translation.get('venue')),
            'performer': _text(translation.get('performer')),
            'description': str(translation.get('description') or ''),
            'performer_details': translation.get('performerDetails') or None
        }
        if not (row['title'] or row['venue'] or row['performer']):
            continue
        if not (row['locale'] and row['title'] and row['venue'] and row['performer']):
            raise ValidationError(
                f"Missing required fields in {row['locale'] or 'unknown'} translation: "
                "title, venue, and performer are required"
            )
        cleaned.append(row)

    if not cleaned:
        raise ValidationError("Missing required fields: date and translations are required")
    if len({row['locale'] for row in cleaned}) != len(cleaned):
        raise ValidationError("Each locale may only appear once in translations")
    return cleaned


def clean_program(program):
    """Pair up the 'sl' and 'original' program lists piece by piece"""
    if not isinstance(program, list) or not program:
        raise ValidationError("Program is required")

    by_locale = {}
    for entry in program:
        if isinstance(entry, dict) and entry.get('locale') in PROGRAM_LOCALES:
            pieces = entry.get('pieces') or []
            if not isinstance(pieces, list):
                raise ValidationError(f"Program pieces for '{entry['locale']}' must be a list")
            by_locale[entry['locale']] = pieces
    if set(by_locale) != set(PROGRAM_LOCALES):
        raise ValidationError("Program must include 'sl' and 'original'")

    rows = []
    longest = max(len(pieces) for pieces in by_locale.values())
    for index in range(longest):
        row = {}
        for locale, pieces in by_locale.items():
            piece = pieces[index] if index < len(pieces) and isinstance(pieces[index], dict) else {}
            row[locale] = {'title': _text(piece.get('title')), 'composer': _text(piece.get('composer'))}
        rows.append(row)
    return rows


def clean_concert(data):
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")

    date = parse_iso_datetime(data.get('date'))
    if not data.get('date'):
        raise ValidationError("Missing required fields: date and translations are required")
    if date is None:
        raise ValidationError("Invalid date format")

    return {
        'date': date,
        'is_visible': data.get('isVisible') is not False,
        'image': _text(data.get('image')),
        'stream_url': _text(data.get('streamUrl')) or None,
        'stripe_product_id': _text(data.get('stripeProductId')) or None,
        'stripe_price_id': _text(data.get('stripePriceId')) or None,
        'translations': clean_translations(data.get('translations')),
        'program': clean_program(data.get('program'))
    }


def _apply(concert, cleaned):
    concert.date = cleaned['date']
    concert.is_visible = cleaned['is_visible']
    concert.image = cleaned['image']
    concert.stream_url = cleaned['stream_url']
    concert.stripe_product_id = cleaned['stripe_product_id']
    concert.stripe_price_id = cleaned['stripe_price_id']

    concert.translations = [ConcertTranslation(**row) for row in cleaned['translations']]
    concert.program = [
        ProgramPiece(order=index, translations=[
            ProgramPieceTranslation(locale=locale, **texts) for locale, texts in row.items()
        ])
        for index, row in enumerate(cleaned['program'])
    ]


def create_concert(data):
    cleaned = clean_concert(data)
    concert = Concert()
    _apply(concert, cleaned)
    db.session.add(concert)
    db.session.commit()
    print(f"[Concerts] Created concert {concert.id}")
    return concert


def replace_concert(concert, data):
    cleaned = clean_concert(data)
    # Flush the old rows first so the (concert, locale) unique keys are free again
    concert.translations = []
    concert.program = []
    db.session.flush()
    _apply(concert, cleaned)
    db.session.commit()
    print(f"[Concerts] Replaced concert {concert.id}")
    return concert


def list_concerts(include_drafts=False):
    query = Concert.query
    if not include_drafts:
        query = query.filter_by(is_visible=True)
    return query.order_by(Concert.date.desc()).all()


def serialize_program_piece(piece, locale):
    preferred = locale if locale in PROGRAM_LOCALES else 'sl'
    translation = piece.translation_for(preferred, 'sl', 'original')
    return {
        'id': piece.id,
        'order': piece.order,
        'title': translation.title if translation else '',
        'composer': translation.composer if translation else ''
    }


def serialize_concert(concert, locale, fallback=False):
    """Concert in one locale, or None when it has no translation for it.

    With fallback, any available translation is used instead.
    """
    translation = concert.translation_for(locale)
    if translation is None and fallback and concert.translations:
        translation = concert.translations[0]
    if translation is None:
        return None
    return {
        'id': concert.id,
        'title': translation.title,
        'subtitle': translation.subtitle,
        'date': isoformat(concert.date),
        'venue': translation.venue,
        'performer': translation.performer,
        'description': translation.description,
        'performerDetails': translation.performer_details,
        'image': concert.image,
        'isVisible': concert.is_visible,
        'purchasable': bool(concert.stripe_price_id),
        'createdAt': isoformat(concert.created_at),
        'updatedAt': isoformat(concert.updated_at),
        'program': [serialize_program_piece(piece, locale) for piece in concert.program]
    }


def serialize_concert_for_editing(concert):
    """Every translation, as the admin edit form needs it"""
    return {
        'id': concert.id,
        'date': isoformat(concert.date),
        'image': concert.image,
        'streamUrl': concert.stream_url,
        'isVisible': concert.is_visible,
        'stripeProductId': concert.stripe_product_id,
        'stripePriceId': concert.stripe_price_id,
        'createdAt': isoformat(concert.created_at),
        'updatedAt': isoformat(concert.updated_at),
        'translations': [{
            'locale': t.locale,
            'title': t.title,
            'subtitle': t.subtitle,
            'venue': t.venue,
            'performer': t.performer,
            'description': t.description,
            'performerDetails': t.performer_details
        } for t in concert.translations],
        'program': [{
            'id': piece.id,
            'order': piece.order,
            'translations': [{'locale': t.locale, 'title': t.title, 'composer': t.composer}
                             for t in piece.translations]
        } for piece in concert.program]
    }
