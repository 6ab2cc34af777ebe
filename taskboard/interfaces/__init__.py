from .entities import Task
from .entities import User
from .event import Event
from .persistence import TaskPersistenceService
from .persistence import UserPersistenceService
from .storage import Storage
from .types import EntityType
from .types import EventType
from .types import TaskStatus

__all__ = [
    'EntityType',
    'Event',
    'EventType',
    'Storage',
    'Task',
    'TaskPersistenceService',
    'TaskStatus',
    'User',
    'UserPersistenceService',
]
