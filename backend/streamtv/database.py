from sqlalchemy import create_engine
from sqlalchemy.orm import declarative_base, sessionmaker

from streamtv.config import DATABASE_URL


def make_engine(url: str = DATABASE_URL, **kwargs):
    # SQLite connections are handed between FastAPI's worker threads
    if url.startswith("sqlite"):
        kwargs.setdefault("connect_args", {"check_same_thread": False})
    return create_engine(url, **kwargs)


# Engine & session setup
engine = make_engine()
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

# Base for models
Base = declarative_base()


# Dependency for routes
def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None):
    """Create all tables and make sure the customer ID sequence row exists."""
    # models must be imported so their tables are registered on Base
    from streamtv import models  # noqa: F401
    from streamtv.customer_ids import ensure_sequence

    bind = bind if bind is not None else engine
    Base.metadata.create_all(bind=bind)

    db = sessionmaker(autocommit=False, autoflush=False, bind=bind)()
    try:
        ensure_sequence(db)
        db.commit()
    finally:
        db.close()
