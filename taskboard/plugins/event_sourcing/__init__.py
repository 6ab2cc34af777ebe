from .task_persistence import EventSourcingTaskPersistence
from .user_persistence import EventSourcingUserPersistence


TASKBOARD_PLUGIN = 'event_sourcing_plugin'


def register_plugin(registry):
    return registry \
        .register_task_persistence('event_sourcing',
                                   EventSourcingTaskPersistence) \
        .register_user_persistence('event_sourcing',
                                   EventSourcingUserPersistence)
