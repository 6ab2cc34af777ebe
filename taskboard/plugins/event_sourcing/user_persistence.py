from taskboard.exceptions import DuplicateNameError
from taskboard.exceptions import UserNotFoundError
from taskboard.interfaces.persistence import UserPersistenceService
from taskboard.interfaces.types import EntityType
from taskboard.plugins.event_sourcing.base import EventSourcingPersistence


def _self(user):
    return user.id


class EventSourcingUserPersistence(EventSourcingPersistence,
                                   UserPersistenceService):
    ENTITY_TYPE = EntityType.USER
    NOT_FOUND_ERROR = UserNotFoundError

    def check_unique_name(self, name, user_id=None):
        holders = self.storage.find_by(self.ENTITY_TYPE, 'name', name)
        if any(holder.id != user_id for holder in holders):
            raise DuplicateNameError(name)

    def upsert(self, user):
        if user.id is None:
            self.check_unique_name(user.name)
            return self.insert(user, related_user_id=_self)

        existing = self.get_existing(user.id)
        self.check_unique_name(user.name, user_id=existing.id)
        return self.update(
            existing.set(name=user.name), related_user_id=_self)
