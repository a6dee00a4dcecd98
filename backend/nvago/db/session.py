from functools import lru_cache
import os

from sqlalchemy.pool import StaticPool
from sqlmodel import create_engine, Session, SQLModel

DATABASE_URL = os.getenv("DATABASE_URL", "postgresql+psycopg2://postgres:postgres@db:5432/nvago")
DB_ECHO = os.getenv("DB_ECHO", "false").lower() in ("1", "true", "yes")


@lru_cache(maxsize=None)
def get_engine():
    if DATABASE_URL.startswith("sqlite"):
        # one shared connection so an in-memory database survives across sessions
        return create_engine(
            DATABASE_URL,
            echo=DB_ECHO,
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
    return create_engine(DATABASE_URL, echo=DB_ECHO)


def init_db() -> None:
    from nvago.models import order  # noqa: F401  (registers the tables)

    SQLModel.metadata.create_all(get_engine())


def get_session() -> Session:
    engine = get_engine()
    return Session(engine)
