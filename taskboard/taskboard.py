import importlib
import logging

from pyrsistent import field
from pyrsistent import m
from pyrsistent import PMap
from pyrsistent import pmap
from pyrsistent import PRecord

from taskboard.interfaces.persistence import TaskPersistenceService
from taskboard.interfaces.persistence import UserPersistenceService
from taskboard.interfaces.storage import Storage

log = logging.getLogger(__name__)


def _implements(interface, name):
    def invariant(impls):
        return (
            all(issubclass(v, interface) for v in impls.values()),
            '{} must always be a {}'.format(name, interface.__name__)
        )
    return invariant


class Registry(PRecord):
    plugin_modules = field(type=PMap, initial=m(), factory=pmap)
    """
    A map of plugin names (str) to that plugins entry point (a module)
    """

    def register_storage(self, name, storage_cls):
        """Helper method for adding a storage backend"""
        return self.transform(('storages', name), lambda _: storage_cls)

    def register_task_persistence(self, name, service_cls):
        """Helper method for adding a task persistence service variant"""
        return self.transform(
            ('task_persistence_services', name), lambda _: service_cls
        )

    def register_user_persistence(self, name, service_cls):
        """Helper method for adding a user persistence service variant"""
        return self.transform(
            ('user_persistence_services', name), lambda _: service_cls
        )

    storages = field(
        type=PMap, initial=m(), factory=pmap,
        invariant=_implements(Storage, 'storages'),
    )
    """
    A map of storage backend names (str) to a class definition which
    implements :class:`taskboard.interfaces.storage.Storage`
    """
    task_persistence_services = field(
        type=PMap, initial=m(), factory=pmap,
        invariant=_implements(TaskPersistenceService,
                              'task_persistence_services'),
    )
    user_persistence_services = field(
        type=PMap, initial=m(), factory=pmap,
        invariant=_implements(UserPersistenceService,
                              'user_persistence_services'),
    )


class PersistenceServices(PRecord):
    """The persistence services selected at startup, sharing one storage"""
    storage = field(type=Storage, mandatory=True)
    tasks = field(type=TaskPersistenceService, mandatory=True)
    users = field(type=UserPersistenceService, mandatory=True)


class Taskboard:
    """Main entry point for assembling the persistence layer

    Plugins advertise storage backends and persistence service variants;
    the configuration passed at startup picks which of them are used.

    Typical use would be:

        tb = Taskboard()
        tb.load_plugin('taskboard.plugins.persistence')
        tb.load_plugin('taskboard.plugins.event_sourcing')

        storage = tb.storage_from_config(
            provider='file',
            provider_config={'directory': '/var/lib/taskboard'},
        )
        tasks = tb.task_persistence_from_config('event_sourcing', storage)
    """

    registry = Registry()

    def load_plugin(self, provider_module):
        module = importlib.import_module(provider_module)
        plugin_name = module.TASKBOARD_PLUGIN

        name_update = Registry(plugin_modules=m().set(plugin_name, module))
        plugin_update = module.register_plugin(Registry())

        def conflict_check(old, new):
            # Any PMap in the registry ought have no duplicate keys,
            # if they do that means two plugins tried to define the same
            # storage or service
            if type(old) == PMap:
                conflicts = set(old.keys()) & set(new.keys())
                if conflicts:
                    raise ValueError(
                        '{0} is trying to register elements that already '
                        'exist in the registry: {1}'.format(
                            plugin_name, conflicts
                        )
                    )
            return old.update(new)

        self.registry = self.registry.update_with(
            conflict_check, plugin_update, name_update
        )
        log.debug('Loaded plugin {} from {}'.format(
            plugin_name, provider_module))

    def _lookup(self, kind, registered, provider):
        if provider not in registered:
            raise ValueError(
                '{0} {1} not registered; available: {2}'.format(
                    provider, kind, sorted(registered.keys())
                )
            )
        return registered[provider]

    def storage_from_config(self, provider, provider_config=None):
        """
        :param str provider: The storage backend to use.
        :param dict provider_config: The arguments needed to instantiate
            the backend.
        """
        if provider_config is None:
            provider_config = dict()

        storage_cls = self._lookup(
            'storage', self.registry.storages, provider)
        return storage_cls(**provider_config)

    def task_persistence_from_config(self, variant, storage):
        service_cls = self._lookup(
            'task persistence', self.registry.task_persistence_services,
            variant,
        )
        return service_cls(storage)

    def user_persistence_from_config(self, variant, storage):
        service_cls = self._lookup(
            'user persistence', self.registry.user_persistence_services,
            variant,
        )
        return service_cls(storage)

    def build_services(self, config):
        """Load the configured plugins and build both persistence services

        :param TaskboardConfig config: The startup configuration
        """
        for plugin in config.plugins:
            if plugin not in self._loaded_modules():
                self.load_plugin(plugin)

        storage = self.storage_from_config(
            config.storage, dict(config.storage_config))
        log.info('Using {} storage with {} persistence'.format(
            config.storage, config.persistence))
        return PersistenceServices(
            storage=storage,
            tasks=self.task_persistence_from_config(
                config.persistence, storage),
            users=self.user_persistence_from_config(
                config.persistence, storage),
        )

    def _loaded_modules(self):
        return {
            module.__name__ for module in self.registry.plugin_modules.values()
        }
