"""
Email Service for Way2PG
========================
Handles outgoing mail:
- New accommodation request notifications to owners
- Email verification codes
- Password reset links

Supports both SMTP and SendGrid. Every send returns True/False; failures are
logged and never raised to the caller.
"""

import asyncio
from datetime import datetime
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from typing import Optional

import aiosmtplib
from sendgrid import SendGridAPIClient
from sendgrid.helpers.mail import Mail, Email, To, Content

from way2pg.core.config import settings
from way2pg.core.logging_config import logger

BASE_STYLE = """
    body { font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif; line-height: 1.6; color: #333; }
    .container { max-width: 600px; margin: 0 auto; padding: 20px; }
    .header { background: #0f766e; color: white; padding: 24px; text-align: center; border-radius: 10px 10px 0 0; }
    .content { background: #f9fafb; padding: 24px; border-radius: 0 0 10px 10px; }
    .code { font-size: 28px; letter-spacing: 6px; font-weight: 700; text-align: center; margin: 20px 0; }
    .button { display: inline-block; background: #0f766e; color: white; padding: 12px 24px; text-decoration: none; border-radius: 8px; font-weight: 600; }
    .footer { text-align: center; margin-top: 24px; font-size: 12px; color: #6b7280; }
"""


def render_page(title: str, body: str) -> str:
    return f"""
    <!DOCTYPE html>
    <html>
    <head><style>{BASE_STYLE}</style></head>
    <body>
        <div class="container">
            <div class="header"><h1>{title}</h1></div>
            <div class="content">{body}</div>
            <div class="footer">
                <p>&copy; {datetime.utcnow().year} Way2PG. All rights reserved.</p>
            </div>
        </div>
    </body>
    </html>
    """


class EmailService:
    """Async email service using SMTP or SendGrid"""

    def __init__(self):
        self.smtp_host = settings.SMTP_HOST
        self.smtp_port = settings.SMTP_PORT
        self.smtp_user = settings.SMTP_USER
        self.smtp_password = settings.SMTP_PASSWORD
        self.from_email = settings.EMAIL_FROM
        self.from_name = settings.EMAIL_FROM_NAME
        self.frontend_url = settings.FRONTEND_URL
        self.sendgrid_api_key = settings.SENDGRID_API_KEY
        self.use_sendgrid = settings.USE_SENDGRID and bool(self.sendgrid_api_key)

    @property
    def is_configured(self) -> bool:
        """Check if email service is properly configured"""
        if self.use_sendgrid:
            return bool(self.sendgrid_api_key)
        return bool(self.smtp_host and self.smtp_user and self.smtp_password)

    async def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """
        Send an email asynchronously.

        Returns True if successful, False otherwise.
        """
        if not to_email:
            return False
        if not self.is_configured:
            logger.warning("[Email] Email service not configured, skipping email send")
            return False

        if self.use_sendgrid:
            return await self._send_via_sendgrid(to_email, subject, html_content, text_content)
        return await self._send_via_smtp(to_email, subject, html_content, text_content)

    async def _send_via_sendgrid(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """Send email via SendGrid API"""
        try:
            message = Mail(
                from_email=Email(self.from_email, self.from_name),
                to_emails=To(to_email),
                subject=subject,
                html_content=Content("text/html", html_content)
            )
            if text_content:
                message.add_content(Content("text/plain", text_content))

            sg = SendGridAPIClient(self.sendgrid_api_key)
            response = await asyncio.to_thread(sg.send, message)

            if response.status_code in (200, 201, 202):
                logger.info(f"[Email/SendGrid] Sent to {to_email}: {subject}")
                return True
            logger.error(f"[Email/SendGrid] Failed with status {response.status_code}: {response.body}")
            return False

        except Exception as e:
            logger.error(f"[Email/SendGrid] Failed to send email to {to_email}: {e}")
            return False

    async def _send_via_smtp(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None
    ) -> bool:
        """Send email via SMTP"""
        try:
            message = MIMEMultipart("alternative")
            message["From"] = f"{self.from_name} <{self.from_email}>"
            message["To"] = to_email
            message["Subject"] = subject

            if text_content:
                message.attach(MIMEText(text_content, "plain"))
            message.attach(MIMEText(html_content, "html"))

            await aiosmtplib.send(
                message,
                hostname=self.smtp_host,
                port=self.smtp_port,
                username=self.smtp_user,
                password=self.smtp_password,
                start_tls=True
            )

            logger.info(f"[Email/SMTP] Sent to {to_email}: {subject}")
            return True

        except Exception as e:
            logger.error(f"[Email/SMTP] Failed to send email to {to_email}: {e}")
            return False

    async def send_owner_notification(
        self,
        owner_email: Optional[str],
        student_name: str,
        student_phone: str,
        student_email: Optional[str] = None,
        accommodation_name: Optional[str] = None,
    ) -> bool:
        """Tell an owner that a student asked about one of their listings"""
        if not owner_email:
            logger.info("[Email] Owner has no email on file, skipping booking notification")
            return False

        subject = "New Accommodation Request - Way2PG"
        listing = f" for <strong>{accommodation_name}</strong>" if accommodation_name else ""
        email_row = f"<li>Email: {student_email}</li>" if student_email else ""

        html_content = render_page("New Accommodation Request", f"""
            <p>You have a new request{listing}.</p>
            <ul>
                <li>Name: {student_name}</li>
                <li>Phone: {student_phone}</li>
                {email_row}
            </ul>
            <p>Please contact the student to discuss further.</p>
        """)

        text_lines = [
            "New Accommodation Request",
            "",
            f"Name: {student_name}",
            f"Phone: {student_phone}",
        ]
        if student_email:
            text_lines.append(f"Email: {student_email}")
        text_lines += ["", "Please contact the student to discuss further.", "", "- The Way2PG Team"]

        return await self.send_email(owner_email, subject, html_content, "\n".join(text_lines))

    async def send_email_verification_code(self, to_email: str, user_name: str, code: str) -> bool:
        """Send a six digit verification code"""
        minutes = settings.EMAIL_VERIFICATION_EXPIRE_MINUTES
        subject = "Verify your email - Way2PG"

        html_content = render_page("Verify your email", f"""
            <p>Hi {user_name or 'there'},</p>
            <p>Use this code to verify your email address:</p>
            <div class="code">{code}</div>
            <p style="font-size: 14px; color: #6b7280;">The code expires in {minutes} minutes.</p>
        """)

        text_content = f"""
        Hi {user_name or 'there'},

        Your Way2PG verification code is: {code}

        The code expires in {minutes} minutes.

        - The Way2PG Team
        """

        return await self.send_email(to_email, subject, html_content, text_content)

    async def send_password_reset_email(self, to_email: str, user_name: str, reset_token: str) -> bool:
        """Send password reset link"""
        reset_link = f"{self.frontend_url}/reset-password?token={reset_token}"
        minutes = settings.PASSWORD_RESET_EXPIRE_MINUTES
        subject = "Reset your password - Way2PG"

        html_content = render_page("Password Reset Request", f"""
            <p>Hi {user_name or 'there'},</p>
            <p>We received a request to reset your password.</p>
            <p style="text-align: center;"><a href="{reset_link}" class="button">Reset Password</a></p>
            <p style="font-size: 14px; color: #6b7280;">
                This link expires in {minutes} minutes. If you didn't request a reset, ignore this email.
            </p>
        """)

        text_content = f"""
        Hi {user_name or 'there'},

        Reset your Way2PG password here:

        {reset_link}

        This link expires in {minutes} minutes. If you didn't request a reset, ignore this email.

        - The Way2PG Team
        """

        return await self.send_email(to_email, subject, html_content, text_content)


email_service = EmailService()
