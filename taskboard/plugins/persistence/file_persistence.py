import json
import logging
import os
from threading import Lock

from pyrsistent import m
from pyrsistent import pmap
from pyrsistent import pvector
from pyrsistent import v

from taskboard.interfaces.entities import record_from_row
from taskboard.interfaces.event import Event
from taskboard.interfaces.storage import Storage
from taskboard.interfaces.types import EntityType
from taskboard.utils import to_uuid

log = logging.getLogger(__name__)

EVENTS_FILE = 'events.jsonl'


class FileStorage(Storage):
    """Storage in a directory: one JSON document per entity table and an
    append-only JSON-lines event log.

    Files have no transactions, so a commit writes the entity tables first
    and appends the events afterwards. If the append fails, the tables are
    put back the way they were and the error is raised to the caller.
    """

    def __init__(self, directory):
        self.directory = directory
        self.commit_lock = Lock()
        os.makedirs(directory, exist_ok=True)

    @property
    def events_file(self):
        return os.path.join(self.directory, EVENTS_FILE)

    def table_file(self, entity_type):
        return os.path.join(
            self.directory,
            '{}s.json'.format(EntityType(entity_type).value.lower()),
        )

    def find_by_id(self, entity_type, entity_id):
        return self._load_table(entity_type).get(entity_id)

    def find_all(self, entity_type):
        return pvector(self._load_table(entity_type).values())

    def count(self, entity_type):
        return len(self._load_table(entity_type))

    def read_events(self, entity_id=None):
        entity_id = to_uuid(entity_id)
        acc = v()
        if not os.path.exists(self.events_file):
            return acc
        with open(self.events_file, 'r') as f:
            for line in f:
                if not line.strip():
                    continue
                event = Event.create(json.loads(line))
                if entity_id is None or event.entity_id == entity_id:
                    acc = acc.append(event)
        return pvector(sorted(acc, key=lambda e: e.timestamp))

    def commit(self, writes):
        with self.commit_lock:
            previous = {}
            tables = {}
            for write in writes:
                if write.op == 'append':
                    continue
                if write.entity_type not in tables:
                    previous[write.entity_type] = self._load_table(
                        write.entity_type)
                    tables[write.entity_type] = previous[write.entity_type]
                table = tables[write.entity_type]
                if write.op == 'save':
                    tables[write.entity_type] = table.set(
                        write.entity_id, write.record)
                else:
                    tables[write.entity_type] = table.discard(write.entity_id)

            for entity_type, table in tables.items():
                self._write_table(entity_type, table)

            events = [w.record for w in writes if w.op == 'append']
            try:
                self._append_events(events)
            except OSError:
                log.exception(
                    'Appending {} events to {} failed, restoring tables'.format(
                        len(events), self.events_file))
                for entity_type, table in previous.items():
                    self._write_table(entity_type, table)
                raise

    def _load_table(self, entity_type):
        path = self.table_file(entity_type)
        if not os.path.exists(path):
            return m()
        with open(path, 'r') as f:
            rows = json.load(f)
        return pmap({
            record.id: record
            for record in (record_from_row(entity_type, row)
                           for row in rows.values())
        })

    def _write_table(self, entity_type, table):
        path = self.table_file(entity_type)
        tmp_path = path + '.tmp'
        with open(tmp_path, 'w') as f:
            json.dump(
                {entity_id.hex: record.serialize()
                 for entity_id, record in table.items()},
                f,
                sort_keys=True,
            )
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, path)

    def _append_events(self, events):
        if not events:
            return
        with open(self.events_file, 'a+') as f:
            for event in events:
                f.write("{}\n".format(json.dumps(
                    event.serialize(), sort_keys=True)))
            f.flush()
            os.fsync(f.fileno())
