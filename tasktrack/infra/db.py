from sqlalchemy import create_engine, text
from sqlalchemy.orm import declarative_base, sessionmaker

from tasktrack.config import SETTINGS

engine = create_engine(SETTINGS.database_url, pool_pre_ping=True)
SessionLocal = sessionmaker(bind=engine, autoflush=False, autocommit=False)
Base = declarative_base()


def init_db() -> None:
    with engine.connect() as connection:
        connection.execute(text("SELECT 1"))


def create_schema(bind=None) -> None:
    # Local runs and tests only; deployed databases are migrated with alembic.
    from . import models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
