from uuid import uuid4

from sqlalchemy.orm import DeclarativeBase


def generate_id() -> str:
    return str(uuid4())


class Base(DeclarativeBase):
    pass
