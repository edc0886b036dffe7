# email service: best-effort smtp delivery
# welcome emails and trusted contact notifications, never raises

import asyncio
import logging
import smtplib
from email.message import EmailMessage
from html import escape

from app.config import settings

logger = logging.getLogger(__name__)

WELCOME_SUBJECTS = {
    "en": "Welcome to Lucidify - Your Mental Health Journey Starts Here",
    "si": "Lucidify වෙත සාදරයෙන් පිළිගනිමු - ඔබේ මානසික සෞඛ්‍ය ගමන ආරම්භ වේ",
    "ta": "Lucidify க்கு வரவேற்கிறோம் - உங்கள் மனநல பயணம் இங்கே தொடங்குகிறது",
}

TRUSTED_CONTACT_SUBJECTS = {
    "en": "Lucidify - Trusted Contact Notification",
    "si": "Lucidify - විශ්වාසදායක සම්බන්ධතා දැනුම්දීම",
    "ta": "Lucidify - நம்பகமான தொடர்பு அறிவிப்பு",
}

WELCOME_HTML = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #4A90E2;">Welcome to Lucidify!</h2>
  <p>Hello {name},</p>
  <p>Welcome to Lucidify, your AI-powered mental health companion.</p>
  <p>Here's what you can do with Lucidify:</p>
  <ul>
    <li>Track your daily mood and emotions</li>
    <li>Write in your personal journal with AI-powered prompts</li>
    <li>Chat with our AI assistant for mental health support</li>
    <li>Practice 8-minute wellness sessions</li>
    <li>Discover personalized coping strategies</li>
  </ul>
  <p>Remember, it's okay to not be okay, and we're here to support you every step of the way.</p>
  <p>Best regards,<br>The Lucidify Team</p>
</div>
"""

TRUSTED_CONTACT_HTML = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #4A90E2;">Lucidify Mental Health App</h2>
  <p>Hello,</p>
  <p>You have been set as a trusted contact for <strong>{name}</strong> on the Lucidify mental health app.</p>
  <p><strong>Message from {name}:</strong></p>
  <div style="background-color: #f5f5f5; padding: 15px; border-radius: 5px; margin: 20px 0;">
    <p style="margin: 0;">{message}</p>
  </div>
  <p>If you have any concerns about {name}'s wellbeing, please reach out to them or consider contacting a mental health professional.</p>
  <p>Best regards,<br>The Lucidify Team</p>
</div>
"""


class EmailService:
    """smtp sender. delivery runs in a worker thread so the event loop never blocks."""

    def __init__(self, host: str = settings.SMTP_HOST, port: int = settings.SMTP_PORT,
                 user: str = settings.SMTP_USER, password: str = settings.SMTP_PASS):
        self.host = host
        self.port = port
        self.user = user
        self.password = password

    def _deliver(self, message: EmailMessage):
        with smtplib.SMTP(self.host, self.port, timeout=15) as smtp:
            smtp.starttls()
            if self.user:
                smtp.login(self.user, self.password)
            smtp.send_message(message)

    async def send_email(self, to: str, subject: str, html: str) -> bool:
        message = EmailMessage()
        message["From"] = self.user or "no-reply@lucidify.app"
        message["To"] = to
        message["Subject"] = subject
        message.set_content("This message requires an HTML capable email client.")
        message.add_alternative(html, subtype="html")
        try:
            await asyncio.to_thread(self._deliver, message)
            logger.info(f"Email sent to {to}: {subject}")
            return True
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"Error sending email to {to}: {e}")
            return False

    async def send_welcome_email(self, email: str, name: str, language: str = "en") -> bool:
        subject = WELCOME_SUBJECTS.get(language, WELCOME_SUBJECTS["en"])
        return await self.send_email(email, subject, WELCOME_HTML.format(name=escape(name)))

    async def send_trusted_contact_notification(
        self, contact_email: str, user_name: str, message: str, language: str = "en"
    ) -> bool:
        subject = TRUSTED_CONTACT_SUBJECTS.get(language, TRUSTED_CONTACT_SUBJECTS["en"])
        html = TRUSTED_CONTACT_HTML.format(name=escape(user_name), message=escape(message))
        return await self.send_email(contact_email, subject, html)


# singleton used by the api
email_service = EmailService()


def get_email_service() -> EmailService:
    """dependency injection for the email service"""
    return email_service
