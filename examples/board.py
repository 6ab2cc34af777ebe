#!/usr/bin/env python3
import argparse
import logging

from taskboard.config import load_config
from taskboard.exceptions import DuplicateNameError
from taskboard.interfaces.entities import Task
from taskboard.interfaces.entities import User
from taskboard.interfaces.types import TaskStatus
from taskboard.taskboard import Taskboard

FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s - %(message)s'
LEVEL = logging.DEBUG
logging.basicConfig(format=FORMAT, level=LEVEL)


def parse_args():
    parser = argparse.ArgumentParser(
        description='Runs a small task board session'
    )

    parser.add_argument(
        '-c', '--config',
        dest="config",
        default='./examples/taskboard.yaml',
        help="taskboard config file"
    )

    return parser.parse_args()


def main():
    args = parse_args()
    services = Taskboard().build_services(load_config(args.config))
    services.tasks.clear()
    services.users.clear()

    alice = services.users.upsert(User(name='alice'))
    try:
        services.users.upsert(User(name='alice'))
    except DuplicateNameError as e:
        print(e)

    task = services.tasks.upsert(Task(title='write docs'))
    task = services.tasks.upsert(
        task.set(assignee_id=alice.id, status=TaskStatus.DOING)
    )
    print(services.tasks.get_by_assignee(alice.id))

    for event in services.storage.read_events(task.id):
        print(event.event_type.value, event.entity())


if __name__ == '__main__':
    exit(main())
