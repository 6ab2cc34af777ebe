from .dynamodb_persistence import DynamoDBStorage
from .file_persistence import FileStorage
from .memory_persistence import MemoryStorage


TASKBOARD_PLUGIN = 'persistence_plugin'


def register_plugin(registry):
    return registry \
        .register_storage('memory', MemoryStorage) \
        .register_storage('file', FileStorage) \
        .register_storage('dynamodb', DynamoDBStorage)
