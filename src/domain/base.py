"""Shared base for domain entities"""

import uuid
from sqlalchemy import BigInteger, Integer
from sqlmodel import SQLModel

# BIGINT everywhere except SQLite, which only autoincrements INTEGER PRIMARY KEY
BigIntegerId = BigInteger().with_variant(Integer, "sqlite")


def generate_uuid() -> str:
    """Opaque, globally unique identifier used for client-visible ids"""
    return str(uuid.uuid4())


class BaseModel(SQLModel):
    """Base class for all persisted domain entities"""

    pass
