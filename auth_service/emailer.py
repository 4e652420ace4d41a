# auth_service/emailer.py
import asyncio
import logging

from fastapi import Request
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail as SendGridMail

from .errors import EmailDeliveryError

logger = logging.getLogger(__name__)


OTP_TEMPLATE = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #333;">{heading}</h2>
  <p>Hi {name},</p>
  <p>{intro}</p>
  <div style="background-color: #f4f4f4; padding: 20px; text-align: center; margin: 20px 0;">
    <h1 style="color: #4CAF50; margin: 0; letter-spacing: 5px;">{otp}</h1>
  </div>
  <p>This OTP will expire in {minutes} minutes.</p>
  <p>If you didn't request this, please ignore this email.</p>
</div>
"""

WELCOME_TEMPLATE = """
<div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
  <h2 style="color: #333;">Welcome {name}!</h2>
  <p>Your email has been successfully verified.</p>
  <p><a href="{frontend_url}">Get Started</a></p>
</div>
"""


class EmailSender:
    """SendGrid backed mailer.

    Without an API key and sender address the message is only logged, which
    keeps local development usable without credentials.
    """

    def __init__(self, api_key=None, from_email=None, frontend_url="", otp_expire_minutes=10):
        self.api_key = api_key
        self.from_email = from_email
        self.frontend_url = frontend_url
        self.otp_expire_minutes = otp_expire_minutes

    @classmethod
    def from_config(cls, config):
        return cls(
            api_key=config.SENDGRID_API_KEY,
            from_email=config.MAIL_FROM_EMAIL,
            frontend_url=config.FRONTEND_URL,
            otp_expire_minutes=config.OTP_EXPIRE_MINUTES,
        )

    @property
    def configured(self):
        return bool(self.api_key and self.from_email)

    async def send(self, to_email, subject, html_content):
        if not self.configured:
            logger.warning("⚠️ SendGrid not configured. Email '%s' for %s:\n%s", subject, to_email, html_content)
            return

        message = SendGridMail(
            from_email=self.from_email,
            to_emails=to_email,
            subject=subject,
            html_content=html_content,
        )
        try:
            loop = asyncio.get_running_loop()
            sg = SendGridAPIClient(self.api_key)
            # Run in a thread to avoid blocking async loop
            response = await loop.run_in_executor(None, sg.send, message)
        except Exception as e:
            logger.error("❌ Error sending email via SendGrid to %s: %s", to_email, e)
            raise EmailDeliveryError(f"Failed to send email to {to_email}") from e
        logger.info("✅ Email sent to %s, status: %s", to_email, response.status_code)

    async def send_otp(self, email, otp, name):
        html = OTP_TEMPLATE.format(
            heading="Email Verification",
            name=name,
            intro="Please use the following OTP to verify your email address:",
            otp=otp,
            minutes=self.otp_expire_minutes,
        )
        await self.send(email, "Verify Your Email - OTP", html)

    async def send_password_reset_otp(self, email, otp, name):
        html = OTP_TEMPLATE.format(
            heading="Password Reset",
            name=name,
            intro="Use the following OTP to reset your password:",
            otp=otp,
            minutes=self.otp_expire_minutes,
        )
        await self.send(email, "Password Reset OTP", html)

    async def send_welcome(self, email, name):
        html = WELCOME_TEMPLATE.format(name=name, frontend_url=self.frontend_url)
        try:
            await self.send(email, "Welcome to Our Platform!", html)
        except EmailDeliveryError:
            # Not critical, the account is already verified
            logger.warning("Welcome email to %s was not delivered", email)
            return False
        return True


def get_email_sender(request: Request):
    return request.app.state.email_sender
