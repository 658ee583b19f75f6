import html
import smtplib
import socket
from enum import Enum
from pathlib import Path
from email.errors import MessageError
from email.mime.text import MIMEText
from email.mime.multipart import MIMEMultipart
from email.utils import formataddr
from fastapi import HTTPException, status

from app.core.config import settings
from app.core.dates import utc_now
from app.core.logging import get_logger

logger = get_logger(__name__)

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "email_templates"
PREVIEW_LENGTH = 150

AUTH_FAILED = "Email authentication failed. Check the SMTP username and password."
CONNECTION_FAILED = "Unable to connect to the email server. Check your internet connection."
INVALID_ADDRESS = "Invalid email format."
NOT_AVAILABLE = "Email service not available - mailer not configured"


class MailerStatus(str, Enum):
    READY = "ready"
    MISSING = "missing"
    ERROR = "error"


def render_template(name: str, values: dict) -> str:
    """Fills {{placeholders}} in a template, escaping every value."""
    template = (TEMPLATES_DIR / name).read_text(encoding="utf-8")
    for key, value in values.items():
        template = template.replace("{{" + key + "}}", html.escape(str(value)))
    return template


def preview(message: str, length: int = PREVIEW_LENGTH) -> str:
    return message if len(message) <= length else message[:length] + "..."


def map_smtp_error(error: Exception) -> str:
    if isinstance(error, smtplib.SMTPAuthenticationError):
        return AUTH_FAILED
    if isinstance(error, (smtplib.SMTPRecipientsRefused, smtplib.SMTPSenderRefused)):
        return INVALID_ADDRESS
    if isinstance(error, (smtplib.SMTPConnectError, smtplib.SMTPServerDisconnected, socket.timeout, OSError)):
        return CONNECTION_FAILED
    return f"Email sending failed: {error}"


class ContactMailer:
    def __init__(self, config=None):
        self.config = config or settings
        self.status = self.connect()

    def connect(self) -> MailerStatus:
        required = {
            "SMTP_HOST": self.config.SMTP_HOST,
            "SMTP_PORT": self.config.SMTP_PORT,
            "SMTP_USER": self.config.SMTP_USER,
            "SMTP_PASS": self.config.SMTP_PASS,
        }
        missing = [key for key, value in required.items() if not value]
        if missing:
            logger.error(f"Missing SMTP configuration: {', '.join(missing)}")
            return MailerStatus.MISSING
        try:
            port = int(self.config.SMTP_PORT)
        except (TypeError, ValueError):
            port = 0
        if not 0 < port < 65536:
            logger.error(f"Invalid SMTP_PORT: {self.config.SMTP_PORT!r}")
            return MailerStatus.ERROR
        if not self.config.CONTACT_EMAIL:
            logger.warning("CONTACT_EMAIL is not set, notifications go to SMTP_USER")
        logger.info(f"Mailer configured for {self.config.SMTP_HOST}:{self.config.SMTP_PORT}")
        return MailerStatus.READY

    def is_ready(self) -> bool:
        return self.status == MailerStatus.READY

    @property
    def sender(self) -> str:
        return self.config.SMTP_FROM or self.config.SMTP_USER

    @property
    def recipient(self) -> str:
        return self.config.CONTACT_EMAIL or self.config.SMTP_USER

    def _open(self):
        host, port = self.config.SMTP_HOST, self.config.SMTP_PORT
        timeout = self.config.SMTP_TIMEOUT_SECONDS
        if self.config.SMTP_SECURE:
            server = smtplib.SMTP_SSL(host, port, timeout=timeout)
        else:
            server = smtplib.SMTP(host, port, timeout=timeout)
            server.starttls()
        # App passwords are often pasted with spaces
        server.login(self.config.SMTP_USER, self.config.SMTP_PASS.replace(" ", ""))
        return server

    def verify_connection(self):
        """Raises the underlying smtplib/socket error when the server is unusable."""
        server = self._open()
        try:
            server.noop()
        finally:
            server.quit()

    def test_email_connection(self) -> bool:
        if not self.is_ready():
            logger.error("Mailer is not configured")
            return False
        try:
            self.verify_connection()
        except (smtplib.SMTPException, OSError) as e:
            logger.error(f"SMTP connection test failed: {e}")
            return False
        logger.info("SMTP connection test successful")
        return True

    def build_notification(self, data: dict) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = formataddr(("Aithena Contact Form", self.sender))
        msg["To"] = self.recipient
        msg["Reply-To"] = data["email"]
        msg["Subject"] = f"New Contact Form Submission - {data['first_name']} {data['last_name']}"
        body = render_template("contact_notification.html", {
            "first_name": data["first_name"],
            "last_name": data["last_name"],
            "email": data["email"],
            "message": data["message"],
            "received_at": utc_now().strftime("%A, %B %d, %Y %H:%M UTC"),
        })
        msg.attach(MIMEText(body, "html"))
        return msg

    def build_auto_reply(self, data: dict) -> MIMEMultipart:
        msg = MIMEMultipart("alternative")
        msg["From"] = formataddr(("Aithena", self.sender))
        msg["To"] = data["email"]
        msg["Subject"] = "Thank you for contacting us"
        body = render_template("contact_auto_reply.html", {
            "first_name": data["first_name"],
            "message_preview": preview(data["message"]),
        })
        msg.attach(MIMEText(body, "html"))
        return msg

    def send_contact_email(self, data: dict) -> dict:
        if not self.is_ready():
            logger.error("Contact email requested but the mailer is not configured")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=NOT_AVAILABLE)

        try:
            self.verify_connection()
            server = self._open()
            try:
                notification = self.build_notification(data)
                server.sendmail(self.sender, [self.recipient], notification.as_string())
                logger.info("Notification email sent")

                auto_reply = self.build_auto_reply(data)
                server.sendmail(self.sender, [data["email"]], auto_reply.as_string())
                logger.info("Auto-reply email sent")
            finally:
                server.quit()
        except (smtplib.SMTPException, OSError, MessageError) as e:
            logger.error(f"Failed to send contact emails: {e}")
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=map_smtp_error(e))

        logger.info(f"Contact form emails sent for {data['first_name']} {data['last_name']}")
        return {
            "success": True,
            "message": "Message sent successfully! We'll get back to you soon.",
        }
