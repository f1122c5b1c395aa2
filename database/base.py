# database/base.py
from datetime import datetime, timezone

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def utcnow() -> datetime:
    # เก็บเป็น naive UTC ให้ตรงกับคอลัมน์ DateTime
    return datetime.now(timezone.utc).replace(tzinfo=None)
