"""
Safe Haven Backend: Email Templates
=====================================

HTML bodies for the four messages the backend sends. User-supplied text is
escaped before it is interpolated.
"""

from html import escape
from typing import Any

from safehaven.enums import ContactSubject
from safehaven.services.catalog import service_name

OFFICE_PHONE = "(555) 123-4567"
CRISIS_LINE = "(555) 123-HELP"
OFFICE_EMAIL = "info@shrmcounseling.org"

_FOOTER = (
    '<div style="margin-top: 30px; padding: 15px; background: #f5f5f5; border-radius: 5px; '
    'font-size: 12px; color: #666;">'
    "<p>Safe Haven Restoration Ministries - Providing hope, healing, and restoration "
    "through Christ-centered counseling.</p></div>"
)


def _wrap(title: str, body: str) -> str:
    return (
        '<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">'
        f'<h2 style="color: #3c4535; border-bottom: 2px solid #fac800; padding-bottom: 10px;">'
        f"{title}</h2>{body}{_FOOTER}</div>"
    )


def _appointment_details(appointment: Any, counselor: Any) -> str:
    return (
        f"<p><strong>Service:</strong> {escape(service_name(appointment.service_type))}</p>"
        f"<p><strong>Preferred Date:</strong> {appointment.appointment_date.strftime('%B %d, %Y')}</p>"
        f"<p><strong>Preferred Time:</strong> {appointment.start_time}</p>"
        f"<p><strong>Session Type:</strong> {appointment.session_type.replace('-', ' ')}</p>"
        f"<p><strong>Counselor:</strong> {escape(counselor.first_name)} {escape(counselor.last_name)}</p>"
    )


def booking_confirmation_template(appointment: Any, client: Any, counselor: Any) -> str:
    body = (
        f"<p>Dear {escape(client.first_name)} {escape(client.last_name)},</p>"
        "<p>Thank you for scheduling an appointment with Safe Haven Restoration Ministries. "
        "We have received your request and will contact you within 24 hours to confirm "
        "your appointment details.</p>"
        '<div style="background: #f8f9fa; padding: 20px; border-radius: 5px; margin: 20px 0;">'
        '<h3 style="margin-top: 0;">Appointment Details</h3>'
        f"{_appointment_details(appointment, counselor)}</div>"
        f"<p><strong>Phone:</strong> {OFFICE_PHONE}<br><strong>Email:</strong> {OFFICE_EMAIL}</p>"
        "<p>Blessings,<br>The SHRM Team</p>"
    )
    return _wrap("Appointment Request Received", body)


def booking_notification_template(appointment: Any, client: Any, counselor: Any) -> str:
    notes = ""
    if appointment.client_notes:
        notes = (
            '<div style="background: #e3f2fd; padding: 20px; border-radius: 5px; margin: 20px 0;">'
            '<h3 style="margin-top: 0;">Client Notes</h3>'
            f"<p>{escape(appointment.client_notes)}</p></div>"
        )
    body = (
        '<div style="background: #f8f9fa; padding: 20px; border-radius: 5px; margin: 20px 0;">'
        '<h3 style="margin-top: 0;">Client Information</h3>'
        f"<p><strong>Name:</strong> {escape(client.first_name)} {escape(client.last_name)}</p>"
        f"<p><strong>Email:</strong> {escape(client.email)}</p>"
        f"<p><strong>Phone:</strong> {escape(client.phone or 'Not provided')}</p></div>"
        '<div style="background: #fff3cd; padding: 20px; border-radius: 5px; margin: 20px 0;">'
        '<h3 style="margin-top: 0;">Appointment Details</h3>'
        f"{_appointment_details(appointment, counselor)}</div>"
        f"{notes}"
        "<p>Please contact the client within 24 hours to confirm the appointment details.</p>"
        f"<p><strong>Appointment ID:</strong> {appointment.id}</p>"
    )
    return _wrap("New Appointment Request", body)


def contact_notification_template(
    name: str, email: str, phone: str, subject: ContactSubject, message: str, received_at: str
) -> str:
    body = (
        '<div style="background: #f8f9fa; padding: 20px; border-radius: 5px; margin: 20px 0;">'
        f"<p><strong>Name:</strong> {escape(name)}</p>"
        f"<p><strong>Email:</strong> {escape(email)}</p>"
        f"<p><strong>Phone:</strong> {escape(phone or 'Not provided')}</p>"
        f"<p><strong>Subject:</strong> {subject.label}</p></div>"
        "<h3>Message:</h3>"
        '<div style="background: white; padding: 15px; border-left: 4px solid #3498db;">'
        f"{escape(message).replace(chr(10), '<br>')}</div>"
        f"<p style=\"font-size: 12px; color: #7f8c8d;\">Received: {received_at}</p>"
    )
    return _wrap("New Contact Form Submission", body)


def contact_auto_reply_template(name: str, subject: ContactSubject) -> str:
    crisis = ""
    if subject is ContactSubject.CRISIS:
        crisis = (
            '<div style="background: #fff3cd; border: 1px solid #ffeaa7; padding: 15px; '
            'border-radius: 5px; margin: 20px 0;">'
            '<h4 style="color: #856404; margin-top: 0;">Crisis Support</h4>'
            '<p style="color: #856404;">If you are experiencing a mental health crisis or having '
            f"thoughts of self-harm, please call our 24/7 crisis line at <strong>{CRISIS_LINE}"
            "</strong> or go to your nearest emergency room.</p></div>"
        )
    body = (
        f"<p>Dear {escape(name)},</p>"
        "<p>Thank you for reaching out to Safe Haven Restoration Ministries. We have received "
        f'your message regarding <strong>"{subject.label}"</strong> and will respond within '
        "24 hours.</p>"
        f"<p>If this is urgent, please call us at {OFFICE_PHONE}.</p>"
        f"{crisis}"
        "<p>Blessings,<br>The SHRM Team</p>"
    )
    return _wrap("Thank You for Contacting Us", body)
