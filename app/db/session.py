from sqlalchemy.engine import make_url
from sqlmodel import SQLModel, create_engine, Session
from app.core.config import settings
from app.core.logging import get_logger

logger = get_logger(__name__)


def build_engine(database_url: str, **kwargs):
    url = make_url(database_url)
    # FastAPI runs sync endpoints in a threadpool, SQLite must allow that
    connect_args = {"check_same_thread": False} if url.get_backend_name() == "sqlite" else {}
    return create_engine(
        url,
        connect_args=connect_args,
        pool_pre_ping=True,
        echo=settings.DATABASE_ECHO,
        **kwargs,
    )


engine = build_engine(settings.DATABASE_URL)

def get_session():
    with Session(engine) as session:
        yield session

def create_db_and_tables(bind=None):
    # Registers every table on SQLModel.metadata
    import app.models  # noqa: F401

    bind = bind or engine
    SQLModel.metadata.create_all(bind)
    logger.info(f"Tables ready on {bind.url.get_backend_name()}: {', '.join(sorted(SQLModel.metadata.tables))}")

def drop_db_and_tables(bind=None):
    SQLModel.metadata.drop_all(bind or engine)
