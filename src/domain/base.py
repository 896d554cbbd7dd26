from uuid import uuid4
from sqlmodel import SQLModel


def generate_uuid() -> str:
    return str(uuid4())


def short_id() -> str:
    """Short random suffix for user-created line item and invoice ids"""
    return uuid4().hex[:12]


class BaseModel(SQLModel):
    pass
