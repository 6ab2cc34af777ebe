from enum import auto

from taskboard.utils import AutoEnum


class TaskStatus(AutoEnum):
    TODO = auto()
    DOING = auto()
    DONE = auto()


class EventType(AutoEnum):
    INSERT = auto()
    UPDATE = auto()
    DELETE = auto()


class EntityType(AutoEnum):
    TASK = auto()
    USER = auto()
