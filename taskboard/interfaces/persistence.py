import abc


class TaskPersistenceService(metaclass=abc.ABCMeta):
    """Port through which business rules read and write tasks"""

    @abc.abstractmethod
    def clear(self):
        """Delete every task, recording one DELETE event per task

        :raises ConsistencyError: if any task is still stored afterwards
        """
        pass

    @abc.abstractmethod
    def get_all(self):
        pass

    @abc.abstractmethod
    def get_by_id(self, task_id):
        """Return the task, or None if there is no task with this id"""
        pass

    @abc.abstractmethod
    def get_by_status(self, status):
        pass

    @abc.abstractmethod
    def get_by_assignee(self, user_id):
        pass

    @abc.abstractmethod
    def upsert(self, task):
        """Create the task if it has no id, update the stored one otherwise

        :returns Task: the task as stored, with its id populated
        :raises TaskNotFoundError: if the task has an id that is not stored
        """
        pass

    @abc.abstractmethod
    def delete(self, task_id):
        """
        :raises TaskNotFoundError: if there is no task with this id
        :raises ConsistencyError: if the task is still stored afterwards
        """
        pass


class UserPersistenceService(metaclass=abc.ABCMeta):
    """Port through which business rules read and write users"""

    @abc.abstractmethod
    def clear(self):
        pass

    @abc.abstractmethod
    def get_all(self):
        pass

    @abc.abstractmethod
    def get_by_id(self, user_id):
        pass

    @abc.abstractmethod
    def upsert(self, user):
        """Create the user if it has no id, rename the stored one otherwise

        :raises UserNotFoundError: if the user has an id that is not stored
        :raises DuplicateNameError: if another user already has this name
        """
        pass
