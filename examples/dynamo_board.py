#!/usr/bin/env python3
import logging
import os

from boto3 import session
from botocore.exceptions import ClientError

from taskboard.config import TaskboardConfig
from taskboard.interfaces.entities import Task
from taskboard.interfaces.entities import User
from taskboard.taskboard import Taskboard

FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(funcName)s - %(message)s'
LEVEL = logging.DEBUG
logging.basicConfig(format=FORMAT, level=LEVEL)


def main():
    s = session.Session(
        region_name='foo',
        aws_access_key_id='foo',
        aws_secret_access_key='bar'
    )
    dynamo_address = os.getenv('DYNAMO', 'http://dynamodb:8000')

    services = Taskboard().build_services(TaskboardConfig(
        storage='dynamodb',
        storage_config={
            'table_prefix': 'taskboard',
            'endpoint_url': dynamo_address,
            'session': s,
        },
    ))
    try:
        services.storage.create_tables()
    except ClientError:
        pass

    bob = services.users.upsert(User(name='bob'))
    task = services.tasks.upsert(Task(title='deploy', assignee_id=bob.id))
    services.tasks.delete(task.id)
    for event in services.storage.read_events(task.id):
        print(event)


if __name__ == '__main__':
    exit(main())
