import time
import uuid

from pyrsistent import field
from pyrsistent import pmap
from pyrsistent import PRecord

from taskboard.interfaces.types import EntityType
from taskboard.interfaces.types import TaskStatus
from taskboard.utils import field_serializer
from taskboard.utils import to_uuid


def _id_field():
    # None until the persistence service assigns one on creation
    return field(
        type=(uuid.UUID, type(None)),
        initial=None,
        factory=to_uuid,
        serializer=field_serializer,
    )


def _non_empty(name):
    return lambda s: (s.strip() != '', 'empty {}'.format(name))


class Task(PRecord):
    id = _id_field()
    title = field(type=str, mandatory=True, invariant=_non_empty('title'))
    description = field(type=str, initial='')
    status = field(
        type=TaskStatus,
        initial=TaskStatus.TODO,
        factory=TaskStatus,
        serializer=field_serializer,
    )
    # not checked against the user table
    assignee_id = _id_field()
    # we store timestamps as seconds since epoch.
    created_at = field(type=float, initial=time.time, factory=float)
    updated_at = field(type=float, initial=time.time, factory=float)


class User(PRecord):
    id = _id_field()
    name = field(type=str, mandatory=True, invariant=_non_empty('name'))


ENTITY_RECORDS = pmap({
    EntityType.TASK: Task,
    EntityType.USER: User,
})


def entity_type_of(entity):
    for entity_type, record_cls in ENTITY_RECORDS.items():
        if isinstance(entity, record_cls):
            return entity_type
    raise TypeError('{} is not a taskboard entity'.format(type(entity).__name__))


def record_from_row(entity_type, row):
    """Rebuild an entity record from its serialized (stored) form"""
    return ENTITY_RECORDS[EntityType(entity_type)].create(dict(row))
