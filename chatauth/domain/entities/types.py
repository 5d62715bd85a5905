"""Column types shared by the table models."""

from enum import Enum
from typing import Type

from sqlalchemy import Enum as SAEnum


def enum_type(enum_cls: Type[Enum], name: str) -> SAEnum:
    """Portable enum column storing member values as VARCHAR.

    PostgreSQL native enums would need their own migrations whenever a member
    is added, so values are kept as plain strings.
    """
    return SAEnum(
        enum_cls,
        name=name,
        native_enum=False,
        length=20,
        values_callable=lambda members: [member.value for member in members],
    )
