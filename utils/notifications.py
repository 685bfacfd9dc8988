"""
Email notification utilities for the support inbox
"""
from flask import current_app
from flask_mail import Message


def notify_support_new_report(report):
    """
    Email the support inbox about a newly filed support report.

    Args:
        report: The SupportReport that was just created

    Returns:
        bool: True if the email was handed to the mail server
    """
    recipient = current_app.config.get('SUPPORT_EMAIL')
    if not recipient:
        print(f"[NOTIFICATION] No support inbox configured - skipping report {report.id}")
        return False

    # Check if mail is configured
    if not current_app.config.get('MAIL_SERVER'):
        print("[NOTIFICATION] Email not configured - skipping notification")
        print(f"[NOTIFICATION] Would notify {recipient} about report {report.id}")
        return False

    base_url = current_app.config.get('BASE_URL', 'http://localhost:5000').rstrip('/')
    purchased = {True: 'yes', False: 'no', None: 'unknown'}[report.purchased]

    try:
        msg = Message(
            subject=f"Support report #{report.id}: {report.type} (concert {report.concert_id})",
            recipients=[recipient],
            reply_to=report.email,
            sender=current_app.config.get('MAIL_DEFAULT_SENDER')
        )

        msg.body = f"""A viewer filed a support report.

From: {report.email}
Category: {report.type}
Concert: {report.concert_id}
Locale: {report.locale or '-'}

Player state when reported:
  Live now: {'yes' if report.is_live else 'no'}
  Was live earlier: {'yes' if report.ever_live else 'no'}
  Viewing window open: {'yes' if report.window_open else 'no'}
  Ticket purchased: {purchased}

Message:
{report.message or '(none)'}

User agent: {report.user_agent or '-'}

Open reports: {base_url}/admin/reports
"""

        current_app.extensions['mail'].send(msg)
        print(f"[NOTIFICATION] Sent report {report.id} to {recipient}")
        return True

    except Exception as e:
        print(f"[NOTIFICATION] Failed to send notification: {e}")
        return False
