from taskboard.exceptions import TaskNotFoundError
from taskboard.interfaces.persistence import TaskPersistenceService
from taskboard.interfaces.types import EntityType
from taskboard.interfaces.types import TaskStatus
from taskboard.plugins.event_sourcing.base import EventSourcingPersistence
from taskboard.utils import to_uuid


def _assignee(task):
    return task.assignee_id


class EventSourcingTaskPersistence(EventSourcingPersistence,
                                   TaskPersistenceService):
    ENTITY_TYPE = EntityType.TASK
    NOT_FOUND_ERROR = TaskNotFoundError

    def get_by_status(self, status):
        return self.storage.find_by(
            self.ENTITY_TYPE, 'status', TaskStatus(status))

    def get_by_assignee(self, user_id):
        return self.storage.find_by(
            self.ENTITY_TYPE, 'assignee_id', to_uuid(user_id))

    def upsert(self, task):
        if task.id is None:
            return self.insert(task, related_user_id=_assignee)

        existing = self.get_existing(task.id)
        # id and created_at are never taken from the caller
        updated = existing.set(
            title=task.title,
            description=task.description,
            status=task.status,
            assignee_id=task.assignee_id,
            updated_at=task.updated_at,
        )
        return self.update(updated, related_user_id=_assignee)

    def delete(self, task_id):
        existing = self.get_existing(task_id)
        self.remove(existing, related_user_id=existing.assignee_id)
