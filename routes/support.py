from flask import Blueprint, request, jsonify
from models import db, SupportReport
from models.support import STATUS_OPEN, STATUS_RESOLVED
from services import current_identity, admin_required
from services.auth import error_response
from utils import isoformat, utc_now
from utils.notifications import notify_support_new_report

support_bp = Blueprint('support', __name__, url_prefix='/api')

REPORT_STATUSES = (STATUS_OPEN, STATUS_RESOLVED)


def serialize_report(report):
    return {
        'id': report.id,
        'email': report.email,
        'type': report.type,
        'message': report.message,
        'concertId': report.concert_id,
        'locale': report.locale,
        'isLive': report.is_live,
        'everLive': report.ever_live,
        'windowOpen': report.window_open,
        'purchased': report.purchased,
        'userAgent': report.user_agent,
        'userId': report.user_id,
        'status': report.status,
        'createdAt': isoformat(report.created_at),
        'resolvedAt': isoformat(report.resolved_at)
    }


@support_bp.route('/support/report', methods=['POST'])
def create_report():
    """File a support report with a snapshot of what the player saw"""
    body = request.get_json(silent=True) or {}
    email = str(body.get('email') or '').strip()
    if not email or '@' not in email:
        return error_response('invalid_email', 'A valid email address is required', 400)

    try:
        concert_id = int(body.get('concertId'))
    except (TypeError, ValueError):
        return error_response('missing_concert', 'concertId is required', 400)

    purchased = body.get('purchased')
    report = SupportReport(
        email=email,
        type=str(body.get('type') or 'access'),
        message=str(body.get('message') or '') or None,
        concert_id=concert_id,
        locale=str(body.get('locale') or '') or None,
        is_live=bool(body.get('isLive')),
        ever_live=bool(body.get('everLive')),
        window_open=bool(body.get('windowOpen')),
        purchased=purchased if isinstance(purchased, bool) else None,
        user_agent=request.headers.get('User-Agent'),
        user_id=current_identity().user_id,
        status=STATUS_OPEN
    )
    db.session.add(report)
    db.session.commit()

    notify_support_new_report(report)
    return jsonify({'ok': True, 'caseId': report.id})


@support_bp.route('/admin/reports', methods=['GET'])
@admin_required
def list_reports():
    query = SupportReport.query
    status = request.args.get('status')
    if status:
        query = query.filter_by(status=status)
    reports = query.order_by(SupportReport.created_at.desc()).all()
    return jsonify({'items': [serialize_report(report) for report in reports]})


@support_bp.route('/admin/reports', methods=['PUT'])
@admin_required
def update_report():
    """Change a report's status; resolving stamps resolved_at"""
    body = request.get_json(silent=True) or {}
    status = str(body.get('status') or '')
    try:
        report_id = int(body.get('id'))
    except (TypeError, ValueError):
        report_id = None

    if report_id is None or not status:
        return error_response('invalid_request', 'id and status required', 400)
    if status not in REPORT_STATUSES:
        return error_response('invalid_request', f"status must be one of {', '.join(REPORT_STATUSES)}", 400)

    report = db.session.get(SupportReport, report_id)
    if report is None:
        return error_response('not_found', 'Report not found', 404)

    if status == STATUS_RESOLVED and report.status != STATUS_RESOLVED:
        report.resolved_at = utc_now()
    elif status == STATUS_OPEN:
        report.resolved_at = None
    report.status = status
    db.session.commit()

    return jsonify({'ok': True, 'item': serialize_report(report)})
