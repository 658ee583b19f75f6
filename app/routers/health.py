import platform
import time
from fastapi import APIRouter, Depends
from sqlmodel import Session, select, func
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from app.db.session import get_session
from app.models.blog import BlogPost
from app.core.config import settings
from app.core.dates import utc_now
from app.core.responses import envelope

router = APIRouter()

STARTED_AT = time.monotonic()
SERVICE_NAME = "Aithena Backend"


def uptime_seconds() -> int:
    return int(time.monotonic() - STARTED_AT)


def liveness() -> dict:
    return {
        "status": "OK",
        "timestamp": utc_now(),
        "service": SERVICE_NAME,
        "uptime": uptime_seconds(),
        "version": platform.python_version(),
    }


def database_health(session: Session) -> dict:
    try:
        session.connection().execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        session.rollback()
        return {"status": "disconnected", "error": str(e.__class__.__name__), "timestamp": utc_now()}
    bind = session.get_bind()
    return {
        "status": "connected",
        "type": bind.dialect.name,
        "database": bind.url.database,
        "timestamp": utc_now(),
    }


@router.get("")
def system_health(session: Session = Depends(get_session)):
    health = liveness()
    health["uptime"] = f"{uptime_seconds() // 60} minutes"
    health["environment"] = settings.ENVIRONMENT
    health["database"] = database_health(session)
    return envelope("System health check completed", health)


@router.get("/database")
def get_database_health(session: Session = Depends(get_session)):
    return envelope("Database health check completed", database_health(session))


@router.get("/blog")
def blog_health(session: Session = Depends(get_session)):
    try:
        total = session.exec(select(func.count(BlogPost.id))).one()
        published = session.exec(
            select(func.count(BlogPost.id)).where(BlogPost.is_published == True)
        ).one()
    except SQLAlchemyError as e:
        session.rollback()
        return envelope("Blog service health check completed", {
            "status": "error",
            "error": str(e.__class__.__name__),
            "timestamp": utc_now(),
        })
    return envelope("Blog service health check completed", {
        "status": "OK",
        "total_posts": total,
        "published_posts": published,
        "timestamp": utc_now(),
    })
