import logging

import yaml
from pyrsistent import field
from pyrsistent import m
from pyrsistent import PMap
from pyrsistent import pmap
from pyrsistent import PRecord
from pyrsistent import PVector
from pyrsistent import pvector

log = logging.getLogger(__name__)

DEFAULT_PLUGINS = (
    'taskboard.plugins.persistence',
    'taskboard.plugins.event_sourcing',
)


class TaskboardConfig(PRecord):
    # modules providing TASKBOARD_PLUGIN and register_plugin
    plugins = field(type=PVector,
                    initial=pvector(DEFAULT_PLUGINS),
                    factory=pvector)
    storage = field(type=str,
                    initial='memory',
                    invariant=lambda s: (s.strip() != '', 'empty storage'))
    # keyword arguments for the storage backend
    storage_config = field(type=PMap, initial=m(), factory=pmap)
    persistence = field(type=str, initial='event_sourcing')


def load_config(config_file):
    """Read a TaskboardConfig from a YAML file

    An empty file gives the defaults: in-memory storage with the event
    sourcing persistence services.
    """
    with open(config_file, 'r') as istream:
        raw = yaml.safe_load(istream)

    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise ValueError(
            'Config file {} must contain a mapping, got {}'.format(
                config_file, type(raw).__name__)
        )
    log.debug('Loaded config from {}'.format(config_file))
    return TaskboardConfig.create(raw)
