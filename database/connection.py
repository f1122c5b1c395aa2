# database/connection.py
import logging
from contextlib import contextmanager
from typing import Generator, Iterator

from sqlalchemy import create_engine
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from config.settings import settings
from core.errors import PersistenceFailure
from database.base import Base

logger = logging.getLogger(__name__)

DATABASE_URL = settings.DATABASE_URL

engine = create_engine(
    DATABASE_URL,
    connect_args={"check_same_thread": False} if DATABASE_URL.startswith("sqlite") else {},
)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


# ---------- session ----------
def get_db() -> Generator:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@contextmanager
def transaction(db: Session) -> Iterator[Session]:
    """
    หนึ่ง operation = หนึ่ง transaction
    commit เมื่อสำเร็จ, rollback ทุกกรณีที่ล้ม; error ของ SQLAlchemy แปลงเป็น PersistenceFailure
    """
    try:
        yield db
        db.commit()
    except SQLAlchemyError as exc:
        db.rollback()
        logger.exception("Unit of work rolled back (%s)", exc.__class__.__name__)
        raise PersistenceFailure("The data store rejected the change; nothing was saved.") from exc
    except Exception:
        db.rollback()
        raise


# ---------- bootstrap ----------
def create_all_tables(bind=None) -> None:
    # ต้อง import โมเดลก่อนสร้างตาราง
    from modules.data_management import models as _dm_models  # noqa: F401
    from modules.compensation import models as _comp_models  # noqa: F401

    Base.metadata.create_all(bind=bind or engine)
