from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import sessionmaker, Session
from typing import Iterator, Optional
from app.core_settings import get_settings
from app.domain.models import Base

_engine: Optional[Engine] = None
SessionLocal = sessionmaker(autoflush=False, autocommit=False, expire_on_commit=False)

def get_engine() -> Engine:
    """Engine for the configured database, created on first use."""
    global _engine
    if _engine is None:
        _engine = create_engine(get_settings().database_url, echo=False, pool_pre_ping=True)
        SessionLocal.configure(bind=_engine)
    return _engine

def get_db() -> Iterator[Session]:
    get_engine()
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()

def init_models():
    Base.metadata.create_all(get_engine())
