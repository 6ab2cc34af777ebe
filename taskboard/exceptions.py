class TaskboardError(Exception):
    """Base class for errors callers are expected to handle"""


class NotFoundError(TaskboardError):
    kind = 'Entity'

    def __init__(self, entity_id):
        self.entity_id = entity_id
        super().__init__(
            '{} with ID {} does not exist!'.format(self.kind, entity_id)
        )


class TaskNotFoundError(NotFoundError):
    kind = 'Task'


class UserNotFoundError(NotFoundError):
    kind = 'User'


class DuplicateNameError(TaskboardError):
    def __init__(self, name):
        self.name = name
        super().__init__('User with name {!r} already exists'.format(name))


class ConsistencyError(RuntimeError):
    """A write's post-condition was not observed in the store.

    This means the storage layer broke the persistence contract. It is not a
    TaskboardError: normal callers should let it propagate.
    """
