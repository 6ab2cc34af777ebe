import logging
from threading import Lock

from pyrsistent import m
from pyrsistent import pmap
from pyrsistent import pvector
from pyrsistent import v

from taskboard.interfaces.storage import Storage
from taskboard.interfaces.types import EntityType
from taskboard.utils import to_uuid

log = logging.getLogger(__name__)


class MemoryStorage(Storage):
    """Process-local storage; every commit swaps in new persistent maps"""

    def __init__(self):
        self.tables = pmap({entity_type: m() for entity_type in EntityType})
        self.events = v()
        self.commit_lock = Lock()

    def find_by_id(self, entity_type, entity_id):
        return self.tables[EntityType(entity_type)].get(entity_id)

    def find_all(self, entity_type):
        return pvector(self.tables[EntityType(entity_type)].values())

    def count(self, entity_type):
        return len(self.tables[EntityType(entity_type)])

    def read_events(self, entity_id=None):
        entity_id = to_uuid(entity_id)
        return pvector(sorted(
            (e for e in self.events
             if entity_id is None or e.entity_id == entity_id),
            key=lambda e: e.timestamp,
        ))

    def commit(self, writes):
        with self.commit_lock:
            tables = self.tables
            events = self.events
            for write in writes:
                if write.op == 'save':
                    tables = tables.set(
                        write.entity_type,
                        tables[write.entity_type].set(
                            write.entity_id, write.record),
                    )
                elif write.op == 'delete':
                    tables = tables.set(
                        write.entity_type,
                        tables[write.entity_type].discard(write.entity_id),
                    )
                else:
                    events = events.append(write.record)
            # nothing is published until every write has been applied
            self.tables, self.events = tables, events
        log.debug('Committed {} writes'.format(len(writes)))
