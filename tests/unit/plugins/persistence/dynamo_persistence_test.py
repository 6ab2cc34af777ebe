import decimal
import uuid

import pytest
from botocore.exceptions import ClientError
from hypothesis import given
from hypothesis import HealthCheck
from hypothesis import settings
from hypothesis import strategies as st

from taskboard.exceptions import DuplicateNameError
from taskboard.interfaces.entities import Task
from taskboard.interfaces.entities import User
from taskboard.interfaces.event import insert_event_of
from taskboard.interfaces.storage import Transaction
from taskboard.interfaces.types import EntityType
from taskboard.interfaces.types import TaskStatus
from taskboard.plugins.event_sourcing import EventSourcingTaskPersistence
from taskboard.plugins.event_sourcing import EventSourcingUserPersistence
from taskboard.plugins.persistence.dynamodb_persistence import DynamoDBStorage


@pytest.fixture
def persister(mocker):
    mock_session = mocker.Mock()
    mock_session.client.return_value = mocker.Mock()

    tables = {}

    def table(name):
        return tables.setdefault(name, mocker.Mock())

    mock_resource = mocker.Mock()
    mock_resource.Table.side_effect = table
    mock_session.resource.return_value = mock_resource
    persister = DynamoDBStorage(
        table_prefix='foo',
        session=mock_session
    )
    return persister


@pytest.fixture
def task():
    return Task(id=uuid.uuid4(), title='write docs', created_at=1.5,
                updated_at=2.5)


def test_table_names(persister):
    assert persister.table_names[EntityType.TASK] == 'foo_tasks'
    assert persister.table_names[EntityType.USER] == 'foo_users'
    assert persister.events_table_name == 'foo_events'


@settings(suppress_health_check=(HealthCheck.function_scoped_fixture,))
@given(x=st.dictionaries(
    keys=st.text(),
    values=st.decimals(allow_nan=False, allow_infinity=False)
))
def test_replaces_decimals_dict(x, persister):
    for k, v in persister._replace_decimals(x).items():
        assert type(v) == float


@settings(suppress_health_check=(HealthCheck.function_scoped_fixture,))
@given(x=st.lists(st.decimals(allow_nan=False, allow_infinity=False)))
def test_replaces_decimals_list(x, persister):
    assert all([type(v) == float for v in persister._replace_decimals(x)])


@settings(suppress_health_check=(HealthCheck.function_scoped_fixture,))
@given(x=st.one_of(
    st.text(),
    st.booleans(),
    st.none(),
))
def test_replaces_decimals_unaffected(x, persister):
    assert persister._replace_decimals(x) == x


texts = st.text(max_size=5)
tasks = st.builds(
    Task,
    id=st.uuids(),
    title=texts.filter(lambda t: t.strip() != ''),
    description=texts,
    status=st.sampled_from(list(TaskStatus)),
    assignee_id=st.one_of(st.none(), st.uuids()),
    created_at=st.floats(min_value=0, allow_nan=False, allow_infinity=False),
)


@settings(max_examples=50, suppress_health_check=(HealthCheck.function_scoped_fixture,))
@given(x=tasks)
def test_task_to_item(x, persister):
    res = persister._to_item(x.serialize())['M']
    assert res['id'] == {'S': x.id.hex}
    assert res['status'] == {'S': x.status.value}
    assert 'N' in res['created_at'].keys()
    if x.assignee_id is None:
        assert res['assignee_id'] == {'NULL': True}
    else:
        assert res['assignee_id'] == {'S': x.assignee_id.hex}


def test_to_item_nested(persister):
    res = persister._to_item({'a': [True, 1, {'b': None}]})
    assert res == {'M': {'a': {'L': [
        {'BOOL': True},
        {'N': '1'},
        {'M': {'b': {'NULL': True}}},
    ]}}}


def test_to_item_rejects_unknown_types(persister):
    with pytest.raises(TypeError):
        persister._to_item({'a': object()})


def test_find_by_id(persister, task):
    table = persister.tables[EntityType.TASK]
    item = dict(task.serialize(), created_at=decimal.Decimal('1.5'))
    table.get_item.return_value = {'Item': item}

    assert persister.find_by_id(EntityType.TASK, task.id) == task
    assert table.get_item.call_args[1] == {
        'Key': {'id': task.id.hex},
        'ConsistentRead': True,
    }


def test_find_by_id_missing(persister):
    persister.tables[EntityType.USER].get_item.return_value = {}
    assert persister.find_by_id(EntityType.USER, uuid.uuid4()) is None


def test_find_all_paginates(persister, task):
    other = task.set(id=uuid.uuid4())
    table = persister.tables[EntityType.TASK]
    table.scan.side_effect = [
        {'Items': [task.serialize()], 'LastEvaluatedKey': {'id': 'x'}},
        {'Items': [other.serialize()]},
    ]

    assert list(persister.find_all(EntityType.TASK)) == [task, other]
    assert table.scan.call_args_list[1][1] == {
        'ExclusiveStartKey': {'id': 'x'},
        'ConsistentRead': True,
    }


def test_find_by_filters_on_stored_value(persister, task):
    table = persister.tables[EntityType.TASK]
    table.scan.return_value = {'Items': [task.serialize()]}

    assert list(persister.find_by('TASK', 'status', TaskStatus.TODO)) == [task]
    expression = table.scan.call_args[1]['FilterExpression'].get_expression()
    assert expression['values'][0].name == 'status'
    assert expression['values'][1] == 'TODO'


def test_count_paginates(persister):
    table = persister.tables[EntityType.USER]
    table.scan.side_effect = [
        {'Count': 3, 'LastEvaluatedKey': {'id': 'x'}},
        {'Count': 2},
    ]

    assert persister.count(EntityType.USER) == 5
    assert table.scan.call_args_list[0][1] == {
        'Select': 'COUNT',
        'ConsistentRead': True,
    }


def test_read_events(persister, task):
    late = insert_event_of(task, None).set(timestamp=2.0)
    early = insert_event_of(task, None).set(timestamp=1.0)
    persister.events_table.scan.return_value = {
        'Items': [late.serialize(), early.serialize()]
    }

    assert list(persister.read_events(task.id)) == [early, late]
    expression = persister.events_table.scan.call_args[1][
        'FilterExpression'].get_expression()
    assert expression['values'][1] == task.id.hex


def test_commit_is_one_transaction(persister, task):
    event = insert_event_of(task, None)
    txn = Transaction()
    txn.save(task)
    txn.append(event)
    txn.delete(EntityType.USER, task.id)

    persister.commit(txn.writes)

    assert persister.ddb_client.transact_write_items.call_count == 1
    items = persister.ddb_client.transact_write_items.call_args[1][
        'TransactItems']
    assert items[0]['Put']['TableName'] == 'foo_tasks'
    assert items[0]['Put']['Item']['title'] == {'S': 'write docs'}
    assert items[1]['Put']['TableName'] == 'foo_events'
    assert items[1]['Put']['Item']['id'] == {'S': event.id.hex}
    assert items[1]['Put']['ConditionExpression'] == 'attribute_not_exists(id)'
    assert items[2] == {'Delete': {
        'TableName': 'foo_users',
        'Key': {'id': {'S': task.id.hex}},
    }}


def test_commit_failure_is_raised(persister, task):
    persister.ddb_client.transact_write_items.side_effect = ClientError(
        {'Error': {'Code': 'TransactionCanceledException', 'Message': 'no'}},
        'TransactWriteItems',
    )
    with pytest.raises(ClientError):
        with persister.transaction() as txn:
            txn.save(task)
            txn.append(insert_event_of(task, None))


def test_create_tables(persister):
    names = persister.create_tables()

    assert names == ['foo_tasks', 'foo_users', 'foo_events']
    assert persister.ddb_client.create_table.call_count == 3
    assert persister.ddb_client.create_table.call_args[1]['TableName'] == \
        'foo_events'


def test_delete_reads_its_own_write(persister, task):
    current = {task.id.hex: task.serialize()}
    # a replica that has not seen the delete yet
    stale = dict(current)

    def get_item(Key, ConsistentRead=False):
        item = (current if ConsistentRead else stale).get(Key['id'])
        return {'Item': item} if item else {}

    def transact_write_items(TransactItems):
        for item in TransactItems:
            if 'Delete' in item:
                current.pop(item['Delete']['Key']['id']['S'], None)

    persister.tables[EntityType.TASK].get_item.side_effect = get_item
    persister.ddb_client.transact_write_items.side_effect = \
        transact_write_items

    EventSourcingTaskPersistence(persister).delete(task.id)

    assert persister.find_by_id(EntityType.TASK, task.id) is None


def test_clear_counts_its_own_writes(persister, task):
    def scan(ConsistentRead=False, **kwargs):
        if kwargs.get('Select') == 'COUNT':
            return {'Count': 0 if ConsistentRead else 1}
        return {'Items': [task.serialize()]}

    persister.tables[EntityType.TASK].scan.side_effect = scan

    EventSourcingTaskPersistence(persister).clear()

    assert persister.ddb_client.transact_write_items.call_count == 1


def test_name_check_sees_committed_users(persister):
    alice = User(id=uuid.uuid4(), name='alice')

    def scan(ConsistentRead=False, **kwargs):
        return {'Items': [alice.serialize()] if ConsistentRead else []}

    persister.tables[EntityType.USER].scan.side_effect = scan

    with pytest.raises(DuplicateNameError):
        EventSourcingUserPersistence(persister).upsert(User(name='alice'))
    assert persister.ddb_client.transact_write_items.call_count == 0
