import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText

from app.core.config import settings
from app.models.booking import Booking

logger = logging.getLogger(__name__)


def _send_email_sync(to_email: str, subject: str, html_body: str) -> None:
    """Send email via SMTP (blocking). Use from background task."""
    if not settings.email_enabled:
        logger.debug("Email disabled (SMTP not configured), skipping send")
        return
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = f"{settings.from_name} <{settings.from_email}>"
    msg["To"] = to_email
    msg.attach(MIMEText(html_body, "html", "utf-8"))
    try:
        with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
            server.starttls()
            server.login(settings.smtp_user, settings.smtp_password)
            server.sendmail(settings.from_email, [to_email], msg.as_string())
        logger.info("Email sent to %s", to_email)
    except (smtplib.SMTPException, OSError) as e:
        logger.exception("Failed to send email to %s: %s", to_email, e)


def _html_escape(s: str) -> str:
    return (
        s.replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def _resource_display(booking: Booking) -> str:
    if booking.practitioner_id is None:
        return "No preference"
    return booking.resource_name


def build_booking_request_html(booking: Booking) -> str:
    """HTML body telling the customer their request was received and awaits confirmation."""
    date_str = booking.selected_date.strftime("%A, %B %d, %Y")
    return f"""
<!DOCTYPE html>
<html>
<head>
  <meta charset="utf-8">
  <title>Appointment Requested</title>
</head>
<body style="margin:0;padding:0;font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;background-color:#f3f4f6;">
  <table role="presentation" width="100%" cellspacing="0" cellpadding="0" style="max-width:560px;margin:40px auto;background:#ffffff;border-radius:12px;">
    <tr>
      <td style="padding:32px;">
        <h1 style="margin:0 0 8px 0;font-size:22px;color:#111827;">Appointment Requested</h1>
        <p style="margin:0 0 24px 0;font-size:15px;color:#6b7280;">Hi {_html_escape(booking.name)}, we received your request and it is awaiting confirmation.</p>
        <p style="margin:0;font-size:15px;color:#111827;"><strong>Service:</strong> {_html_escape(booking.service_name)} ({booking.service_duration_minutes} min)</p>
        <p style="margin:0;font-size:15px;color:#111827;"><strong>Date:</strong> {date_str}</p>
        <p style="margin:0;font-size:15px;color:#111827;"><strong>Time:</strong> {booking.slot_label}</p>
        <p style="margin:0 0 24px 0;font-size:15px;color:#111827;"><strong>Practitioner:</strong> {_html_escape(_resource_display(booking))}</p>
        <p style="margin:0;font-size:13px;color:#6b7280;">
          {settings.site_name} &nbsp;·&nbsp; {settings.contact_email} &nbsp;·&nbsp; {settings.contact_phone}<br>
          {settings.contact_address}
        </p>
      </td>
    </tr>
  </table>
</body>
</html>
"""


def build_clinic_notification_html(booking: Booking) -> str:
    """HTML body for the front desk: who asked for which slot."""
    rows = [
        ("Name", booking.name),
        ("Email", booking.email),
        ("Phone", booking.phone),
        ("Service", f"{booking.service_name} ({booking.service_duration_minutes} min)"),
        ("Date", booking.date_key),
        ("Time", booking.slot_label),
        ("Practitioner", _resource_display(booking)),
        ("Status", booking.status),
    ]
    body = "".join(
        f'<tr><td style="padding:4px 12px 4px 0;color:#6b7280;">{label}</td>'
        f'<td style="padding:4px 0;color:#111827;">{_html_escape(str(value))}</td></tr>'
        for label, value in rows
    )
    return f"""
<!DOCTYPE html>
<html>
<head><meta charset="utf-8"><title>New Appointment Request</title></head>
<body style="font-family:-apple-system,BlinkMacSystemFont,'Segoe UI',Roboto,sans-serif;">
  <h2 style="color:#111827;">New appointment request #{booking.id}</h2>
  <table role="presentation" cellspacing="0" cellpadding="0">{body}</table>
</body>
</html>
"""


def send_booking_request_email(booking: Booking) -> None:
    """Compose and send the customer acknowledgement (call from background task)."""
    subject = f"{settings.site_name} – Appointment Requested"
    _send_email_sync(booking.email, subject, build_booking_request_html(booking))


def send_clinic_booking_notification_email(clinic_email: str, booking: Booking) -> None:
    subject = f"New appointment request: {booking.date_key} {booking.slot_label}"
    _send_email_sync(clinic_email, subject, build_clinic_notification_html(booking))
