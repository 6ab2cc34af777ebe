import pytest
from pyrsistent import pvector

from taskboard.plugins.event_sourcing import EventSourcingTaskPersistence
from taskboard.plugins.event_sourcing import EventSourcingUserPersistence
from taskboard.plugins.persistence.file_persistence import FileStorage
from taskboard.plugins.persistence.memory_persistence import MemoryStorage


class StickyStorage(MemoryStorage):
    """A store that acknowledges deletes without applying them"""

    def commit(self, writes):
        super().commit(pvector(w for w in writes if w.op != 'delete'))


@pytest.fixture(params=['memory', 'file'])
def storage(request, tmp_path):
    if request.param == 'memory':
        return MemoryStorage()
    return FileStorage(directory=str(tmp_path / 'board'))


@pytest.fixture
def sticky_storage():
    return StickyStorage()


@pytest.fixture
def tasks(storage):
    return EventSourcingTaskPersistence(storage)


@pytest.fixture
def users(storage):
    return EventSourcingUserPersistence(storage)
