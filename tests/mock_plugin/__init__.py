from taskboard.interfaces.persistence import TaskPersistenceService
from taskboard.interfaces.persistence import UserPersistenceService
from taskboard.interfaces.storage import Storage


class DummyStorage(Storage):
    def __init__(self, arg):
        self.arg = arg

    def find_by_id(self, entity_type, entity_id):
        pass

    def find_all(self, entity_type):
        pass

    def count(self, entity_type):
        return 0

    def read_events(self, entity_id=None):
        pass

    def commit(self, writes):
        pass


class DummyTaskPersistence(TaskPersistenceService):
    def __init__(self, storage):
        self.storage = storage

    def clear(self):
        pass

    def get_all(self):
        pass

    def get_by_id(self, task_id):
        pass

    def get_by_status(self, status):
        pass

    def get_by_assignee(self, user_id):
        pass

    def upsert(self, task):
        return task

    def delete(self, task_id):
        pass


class DummyUserPersistence(UserPersistenceService):
    def __init__(self, storage):
        self.storage = storage

    def clear(self):
        pass

    def get_all(self):
        pass

    def get_by_id(self, user_id):
        pass

    def upsert(self, user):
        return user


TASKBOARD_PLUGIN = 'mock_plugin'


def register_plugin(registry):
    registration = registry.register_storage(
        'dummy', DummyStorage
    ).register_task_persistence(
        'dummy', DummyTaskPersistence
    ).register_user_persistence(
        'dummy', DummyUserPersistence
    )

    return registration
