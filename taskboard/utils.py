import uuid
from enum import Enum
from typing import Any
from typing import List
from typing import Optional


class AutoEnum(Enum):
    """
    Enums in Python require that some methods be defined pre-construction if overrides are
    desired, so if we want to create an enum that sets the value of all members to the name
    of said members, we need to create an Enum class that overrides _generate_next_value_ such
    that when EnumBase does its magic, it sees this method.

    Based on the snippet in https://docs.python.org/3/library/enum.html#using-automatic-values
    """
    @staticmethod
    def _generate_next_value_(
        name: str,
        start: int,
        count: int,
        last_values: List[Any],
    ) -> str:
        """Override auto() to set all enum values to the name of the member"""
        return name


def to_uuid(value: Any) -> Optional[uuid.UUID]:
    """Field factory accepting UUIDs, hex/canonical strings or None"""
    if value is None or isinstance(value, uuid.UUID):
        return value
    if isinstance(value, str):
        return uuid.UUID(value)
    # let the field type check reject it
    return value


def serialize_value(value: Any) -> Any:
    """The storable form of a single field value"""
    if isinstance(value, uuid.UUID):
        return value.hex
    if isinstance(value, Enum):
        return value.value
    return value


def field_serializer(_format, value):
    # signature expected by pyrsistent.field(serializer=...)
    return serialize_value(value)
