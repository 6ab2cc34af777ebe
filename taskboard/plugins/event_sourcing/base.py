import logging
import uuid

from taskboard.exceptions import ConsistencyError
from taskboard.interfaces.event import delete_event_of
from taskboard.interfaces.event import insert_event_of
from taskboard.interfaces.event import update_event_of
from taskboard.utils import to_uuid

log = logging.getLogger(__name__)


class EventSourcingPersistence:
    """Shared write path for the event sourcing persistence services.

    Every mutation stages the entity write and its event in one storage
    transaction, so the current-state table and the event log move together.
    Subclasses set ENTITY_TYPE and NOT_FOUND_ERROR.
    """

    ENTITY_TYPE = None
    NOT_FOUND_ERROR = None

    def __init__(self, storage):
        self.storage = storage

    def clear(self):
        cleared = 0
        for entity in self.storage.find_all(self.ENTITY_TYPE):
            with self.storage.transaction() as txn:
                # event staged ahead of the removal
                txn.append(delete_event_of(entity, related_user_id=None))
                txn.delete(self.ENTITY_TYPE, entity.id)
            cleared += 1

        remaining = self.storage.count(self.ENTITY_TYPE)
        if remaining != 0:
            log.error('{} {} entities remain after clear'.format(
                remaining, self.ENTITY_TYPE.value))
            raise ConsistencyError(
                '{} entities not successfully deleted: {} remain'.format(
                    self.ENTITY_TYPE.value, remaining))
        log.info('Cleared {} {} entities'.format(
            cleared, self.ENTITY_TYPE.value))

    def get_all(self):
        return self.storage.find_all(self.ENTITY_TYPE)

    def get_by_id(self, entity_id):
        try:
            entity_id = to_uuid(entity_id)
        except ValueError:
            # not an id any entity could have
            return None
        return self.storage.find_by_id(self.ENTITY_TYPE, entity_id)

    def get_existing(self, entity_id):
        entity = self.get_by_id(entity_id)
        if entity is None:
            raise self.NOT_FOUND_ERROR(entity_id)
        return entity

    def insert(self, entity, related_user_id=lambda e: None):
        created = entity.set(id=uuid.uuid4())
        with self.storage.transaction() as txn:
            txn.save(created)
            txn.append(insert_event_of(created, related_user_id(created)))
        log.info('Created {} {}'.format(self.ENTITY_TYPE.value, created.id))
        return created

    def update(self, updated, related_user_id=lambda e: None):
        with self.storage.transaction() as txn:
            txn.save(updated)
            txn.append(update_event_of(updated, related_user_id(updated)))
        log.info('Updated {} {}'.format(self.ENTITY_TYPE.value, updated.id))
        return updated

    def remove(self, entity, related_user_id):
        with self.storage.transaction() as txn:
            txn.delete(self.ENTITY_TYPE, entity.id)
            txn.append(delete_event_of(entity, related_user_id))

        if self.get_by_id(entity.id) is not None:
            log.error('{} {} still stored after delete'.format(
                self.ENTITY_TYPE.value, entity.id))
            raise ConsistencyError(
                'Deletion of {} with ID {} failed!'.format(
                    self.ENTITY_TYPE.value, entity.id))
        log.info('Deleted {} {}'.format(self.ENTITY_TYPE.value, entity.id))
