import abc
import contextlib
import logging
import uuid

from pyrsistent import field
from pyrsistent import PRecord
from pyrsistent import pvector
from pyrsistent import v

from taskboard.interfaces.entities import entity_type_of
from taskboard.interfaces.event import Event
from taskboard.interfaces.types import EntityType
from taskboard.utils import serialize_value
from taskboard.utils import to_uuid

log = logging.getLogger(__name__)

WRITE_OPS = {'save', 'delete', 'append'}


class Write(PRecord):
    def __invariant__(self):
        if self.op == 'append':
            return (
                isinstance(self.record, Event),
                'append writes must carry an Event',
            )
        return (
            self.entity_type is not None and self.entity_id is not None,
            '{} writes need an entity type and id'.format(self.op),
        )

    op = field(type=str,
               mandatory=True,
               invariant=lambda x: (x in WRITE_OPS,
                                    'op not in {}'.format(WRITE_OPS)))
    entity_type = field(type=(EntityType, type(None)), initial=None)
    entity_id = field(type=(uuid.UUID, type(None)), initial=None,
                      factory=to_uuid)
    # the entity to save or the event to append; None for deletes
    record = field(initial=None)


class Transaction:
    """Writes staged for a single unit of work.

    Nothing reaches the store until the surrounding
    :meth:`Storage.transaction` block exits without raising.
    """

    def __init__(self):
        self.writes = v()

    def save(self, entity):
        if entity.id is None:
            raise ValueError('Cannot save an entity without an id')
        self._stage(Write(
            op='save',
            entity_type=entity_type_of(entity),
            entity_id=entity.id,
            record=entity,
        ))

    def delete(self, entity_type, entity_id):
        self._stage(Write(
            op='delete',
            entity_type=EntityType(entity_type),
            entity_id=entity_id,
        ))

    def append(self, event):
        self._stage(Write(op='append', record=event))

    def _stage(self, write):
        log.debug('Staging {} of {}'.format(
            write.op, write.entity_id or write.record.id))
        self.writes = self.writes.append(write)


class Storage(metaclass=abc.ABCMeta):
    """Current-state tables for every entity kind plus the event table"""

    @abc.abstractmethod
    def find_by_id(self, entity_type, entity_id):
        """Return the stored record, or None if there is none

        :param EntityType entity_type: which table to read
        :param uuid.UUID entity_id: the record's id
        """
        pass

    @abc.abstractmethod
    def find_all(self, entity_type):
        """Return a PVector of every stored record of this kind"""
        pass

    def find_by(self, entity_type, field_name, value):
        """Return a PVector of the records whose field equals value

        Values are compared in their stored form, so a status name matches
        the TaskStatus member and a hex string matches the UUID.
        """
        wanted = serialize_value(value)
        return pvector(
            record for record in self.find_all(entity_type)
            if serialize_value(record.get(field_name)) == wanted
        )

    @abc.abstractmethod
    def count(self, entity_type):
        pass

    @abc.abstractmethod
    def read_events(self, entity_id=None):
        """Return a PVector of events ordered by timestamp

        :param uuid.UUID entity_id: only return the events of this entity
        """
        pass

    @abc.abstractmethod
    def commit(self, writes):
        """Apply the staged writes of one transaction as a unit

        Implementations either apply every write or none of them. Where the
        backend cannot do that, entity writes go first and a failing event
        append must be raised, never dropped.
        """
        pass

    @contextlib.contextmanager
    def transaction(self):
        txn = Transaction()
        yield txn
        if txn.writes:
            self.commit(txn.writes)
