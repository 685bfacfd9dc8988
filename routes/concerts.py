from flask import Blueprint, request, jsonify
from models import db
from services import (can_access_stream, current_identity, admin_required, is_within_window,
                      probe_availability, playback_url_for, DenialReason)
from services.auth import error_response
from services.concerts import (ValidationError, create_concert, replace_concert, list_concerts,
                               serialize_concert, serialize_concert_for_editing)
from services.entitlement import find_concert
from utils import get_language, to_epoch_ms, utc_now

concerts_bp = Blueprint('concerts', __name__, url_prefix='/api/concerts')

DENIALS = {
    DenialReason.AUTHENTICATION_REQUIRED: (401, 'Authentication required'),
    DenialReason.NOT_FOUND: (404, 'Concert not found'),
    DenialReason.PURCHASE_REQUIRED: (403, 'A ticket is required to watch this concert')
}


def not_found():
    return error_response('not_found', 'Concert not found', 404)


@concerts_bp.route('', methods=['GET'])
def list_all():
    """List published concerts (drafts too for admins with ?admin=true)"""
    locale = get_language()
    include_drafts = request.args.get('admin') == 'true' and current_identity().is_admin

    items = []
    for concert in list_concerts(include_drafts=include_drafts):
        item = serialize_concert(concert, locale, fallback=True)
        if item is None:
            print(f"[Concerts] Concert {concert.id} has no translations, skipping")
            continue
        items.append(item)
    return jsonify(items)


@concerts_bp.route('', methods=['POST'])
@admin_required
def create():
    try:
        concert = create_concert(request.get_json(silent=True))
    except ValidationError as e:
        return error_response('invalid_request', str(e), 400)

    return jsonify(serialize_concert(concert, get_language(), fallback=True)), 201


@concerts_bp.route('/<int:concert_id>', methods=['GET'])
def detail(concert_id):
    if request.args.get('check') == 'true':
        return check_availability(concert_id)
    if request.args.get('stream') == 'true':
        return stream_reference(concert_id)

    identity = current_identity()
    concert = find_concert(identity, concert_id)
    if concert is None:
        return not_found()

    if request.args.get('allTranslations') == 'true':
        if not identity.is_admin:
            return error_response('admin_required', 'Admin access required', 403)
        return jsonify(serialize_concert_for_editing(concert))

    locale = get_language()
    localized = serialize_concert(concert, locale)
    if localized is None:
        return error_response('translation_missing',
                              f"No translation found for concert {concert.id} in locale {locale}", 404)
    return jsonify(localized)


def check_availability(concert_id):
    """Is the stream live right now? Outside the viewing window it never is."""
    concert = find_concert(current_identity(), concert_id)
    if concert is None:
        return not_found()

    now = utc_now()
    if not is_within_window(concert.date, now):
        return jsonify({'available': False, 'now': to_epoch_ms(now)})

    available = probe_availability(playback_url_for(concert))
    return jsonify({'available': available, 'now': to_epoch_ms(now)})


def stream_reference(concert_id):
    """Hand out the playback URL to entitled viewers inside the window"""
    decision = can_access_stream(current_identity(), concert_id)
    if not decision.allowed:
        status, message = DENIALS[decision.reason]
        return error_response(decision.reason.value, message, status)

    concert = decision.concert
    if not is_within_window(concert.date, utc_now()):
        return error_response('outside_window', 'Stream not available at this time', 403)

    playback_url = playback_url_for(concert)
    if not playback_url:
        return error_response('stream_not_configured', 'Stream not configured', 404)

    return jsonify({'playbackUrl': playback_url})


@concerts_bp.route('/<int:concert_id>', methods=['PUT'])
@admin_required
def update(concert_id):
    """Replace a concert's date, visibility, translations and program"""
    concert = find_concert(current_identity(), concert_id)
    if concert is None:
        return not_found()

    try:
        concert = replace_concert(concert, request.get_json(silent=True))
    except ValidationError as e:
        db.session.rollback()
        return error_response('invalid_request', str(e), 400)

    return jsonify(serialize_concert(concert, get_language(), fallback=True))


@concerts_bp.route('/<int:concert_id>', methods=['DELETE'])
@admin_required
def delete(concert_id):
    concert = find_concert(current_identity(), concert_id)
    if concert is None:
        return not_found()

    # Tickets are the purchase audit trail and are never deleted
    if concert.tickets:
        return error_response('concert_has_tickets',
                              'Concerts with tickets cannot be deleted; unpublish it instead', 409)

    db.session.delete(concert)
    db.session.commit()
    print(f"[Concerts] Deleted concert {concert_id}")
    return jsonify({'message': 'Concert deleted successfully'})
