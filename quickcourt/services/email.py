"""
Email service – login codes and booking status updates via SMTP.

In development (no SMTP configured), emails are logged to the console
so you can see what *would* be sent without configuring a mail server.
"""

from __future__ import annotations

import logging
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

import aiosmtplib

from quickcourt.config import (
    OTP_TTL_SECONDS,
    SMTP_FROM_EMAIL,
    SMTP_HOST,
    SMTP_PASSWORD,
    SMTP_PORT,
    SMTP_USE_TLS,
    SMTP_USERNAME,
    smtp_enabled,
)
from quickcourt.models import Booking

logger = logging.getLogger(__name__)


def _booking_summary(booking: Booking) -> str:
    """One-line human-readable summary of a booking."""
    where = " · ".join(p for p in (booking.venue_name, booking.court_name) if p)
    when = f"{booking.booking_date:%a %d %b %Y} {booking.start_time}–{booking.end_time}"
    return f"{where} · {when} · {booking.total_amount:.2f}"


async def _send(to_email: str, subject: str, plain: str, html: str) -> None:
    msg = MIMEMultipart("alternative")
    msg["Subject"] = subject
    msg["From"] = SMTP_FROM_EMAIL
    msg["To"] = to_email
    msg.attach(MIMEText(plain, "plain"))
    msg.attach(MIMEText(html, "html"))

    try:
        await aiosmtplib.send(
            msg,
            hostname=SMTP_HOST,
            port=SMTP_PORT,
            username=SMTP_USERNAME,
            password=SMTP_PASSWORD,
            start_tls=SMTP_USE_TLS,
        )
        logger.info("Email sent to %s (%s)", to_email, subject)
    except Exception:
        logger.exception("Failed to send email to %s", to_email)
        raise


async def send_otp_email(to_email: str, otp_code: str) -> None:
    subject = "Your QuickCourt login code"
    minutes = OTP_TTL_SECONDS // 60

    if not smtp_enabled():
        logger.info("📧 [DEV] Login code for %s: %s (valid %d min)", to_email, otp_code, minutes)
        return

    plain = f"Your login code is {otp_code}. It expires in {minutes} minutes."
    html = f"""
    <html>
    <body style="font-family:sans-serif;color:#333">
      <h2>QuickCourt login</h2>
      <p>Your one-time code is:</p>
      <p style="font-size:2em;font-weight:bold;letter-spacing:0.2em">{otp_code}</p>
      <p style="font-size:0.9em;color:#888">It expires in {minutes} minutes.
        If you didn't request it, you can ignore this email.</p>
    </body>
    </html>
    """
    await _send(to_email, subject, plain, html)


async def send_booking_status_email(booking: Booking, reason: str | None = None) -> None:
    """Tell the customer their booking was confirmed or cancelled by the venue."""
    if not booking.user_email:
        return

    status = booking.status.value
    subject = f"Booking #{booking.id} {status}"
    summary = _booking_summary(booking)

    if not smtp_enabled():
        logger.info(
            "📧 [DEV] Would send email to %s:\n  Subject: %s\n  %s%s",
            booking.user_email,
            subject,
            summary,
            f"\n  Reason: {reason}" if reason else "",
        )
        return

    plain = f"Your booking has been {status}.\n\n{summary}"
    if reason:
        plain += f"\n\nReason: {reason}"
    html = f"""
    <html>
    <body style="font-family:sans-serif;color:#333">
      <h2>Booking {status}</h2>
      <p>{escape(summary)}</p>
      {f'<p><strong>Reason:</strong> {escape(reason)}</p>' if reason else ''}
    </body>
    </html>
    """
    await _send(booking.user_email, subject, plain, html)
