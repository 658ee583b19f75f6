from functools import lru_cache
from fastapi import APIRouter, Depends

from app.schemas.contact import ContactRequest
from app.services.email import ContactMailer
from app.core.config import settings
from app.core.dates import utc_now
from app.core.responses import envelope
from app.core.logging import get_logger

router = APIRouter()
logger = get_logger(__name__)


@lru_cache
def get_contact_mailer() -> ContactMailer:
    # Configuration is read once; restart to pick up SMTP changes
    return ContactMailer()


@router.post("")
def submit_contact(data: ContactRequest, mailer: ContactMailer = Depends(get_contact_mailer)):
    logger.info("Contact form submission received")
    result = mailer.send_contact_email(data.model_dump())
    return envelope(result["message"], {"success": result["success"]})


@router.get("/health")
def email_health(mailer: ContactMailer = Depends(get_contact_mailer)):
    """SMTP readiness plus the non-secret parts of its configuration."""
    email_ready = mailer.test_email_connection()
    return envelope("Email health check completed", {
        "status": "OK",
        "email_ready": email_ready,
        "mailer_status": mailer.status.value,
        "config": {
            "smtp_host": settings.SMTP_HOST,
            "smtp_port": settings.SMTP_PORT,
            "smtp_secure": settings.SMTP_SECURE,
            "smtp_user": settings.SMTP_USER,
            "smtp_pass_length": len(settings.SMTP_PASS or ""),
            "smtp_from": settings.SMTP_FROM,
            "contact_email": settings.CONTACT_EMAIL,
            "environment": settings.ENVIRONMENT,
        },
        "timestamp": utc_now(),
    })


@router.get("/debug-email")
def debug_email(mailer: ContactMailer = Depends(get_contact_mailer)):
    email_ready = mailer.test_email_connection()
    return envelope("Email connection test completed", {
        "success": True,
        "email_ready": email_ready,
        "timestamp": utc_now(),
    })
