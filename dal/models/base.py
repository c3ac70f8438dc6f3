import uuid
from datetime import datetime

from sqlalchemy.orm import declarative_base

Base = declarative_base()


def new_id() -> str:
    return str(uuid.uuid4())


def iso(value):
    """ISO string for date/datetime columns, None passthrough"""
    return value.isoformat() if value is not None else None


def local_now() -> datetime:
    return datetime.now()
