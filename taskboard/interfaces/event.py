import json
import time
import uuid

from pyrsistent import field
from pyrsistent import PRecord

from taskboard.interfaces.entities import entity_type_of
from taskboard.interfaces.entities import record_from_row
from taskboard.interfaces.types import EntityType
from taskboard.interfaces.types import EventType
from taskboard.utils import field_serializer
from taskboard.utils import to_uuid


class Event(PRecord):
    """One immutable entry of the audit log.

    Events are only ever appended; no storage backend updates or deletes them.
    """
    id = field(
        type=uuid.UUID,
        initial=uuid.uuid4,
        factory=to_uuid,
        serializer=field_serializer,
    )
    event_type = field(
        type=EventType,
        mandatory=True,
        factory=EventType,
        serializer=field_serializer,
    )
    entity_type = field(
        type=EntityType,
        mandatory=True,
        factory=EntityType,
        serializer=field_serializer,
    )
    entity_id = field(
        type=uuid.UUID,
        mandatory=True,
        factory=to_uuid,
        serializer=field_serializer,
    )
    # json snapshot of every field of the entity at event time
    payload = field(
        type=str,
        mandatory=True,
        invariant=lambda p: (p.strip() != '', 'empty payload'),
    )
    # the assignee for task events, the user itself for user events
    related_user_id = field(
        type=(uuid.UUID, type(None)),
        initial=None,
        factory=to_uuid,
        serializer=field_serializer,
    )
    # we store timestamps as seconds since epoch.
    # use time.time() to generate
    timestamp = field(type=float, initial=time.time, factory=float)

    def entity(self):
        """Reconstruct the entity record captured by this event"""
        return record_from_row(self.entity_type, json.loads(self.payload))


def serialize_payload(entity):
    return json.dumps(entity.serialize(), sort_keys=True)


def _event_of(event_type, entity, related_user_id):
    if entity.id is None:
        raise ValueError('Cannot record an event for an entity without an id')
    return Event(
        event_type=event_type,
        entity_type=entity_type_of(entity),
        entity_id=entity.id,
        payload=serialize_payload(entity),
        related_user_id=related_user_id,
    )


def insert_event_of(entity, related_user_id):
    return _event_of(EventType.INSERT, entity, related_user_id)


def update_event_of(entity, related_user_id):
    return _event_of(EventType.UPDATE, entity, related_user_id)


def delete_event_of(entity, related_user_id):
    return _event_of(EventType.DELETE, entity, related_user_id)
