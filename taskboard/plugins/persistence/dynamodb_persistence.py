import decimal
import logging

import boto3.session as bsession
from boto3.dynamodb.conditions import Attr
from botocore.exceptions import ClientError
from pyrsistent import pmap
from pyrsistent import pvector

from taskboard.interfaces.entities import record_from_row
from taskboard.interfaces.event import Event
from taskboard.interfaces.storage import Storage
from taskboard.interfaces.types import EntityType
from taskboard.utils import serialize_value
from taskboard.utils import to_uuid

log = logging.getLogger(__name__)


class DynamoDBStorage(Storage):
    """Storage on DynamoDB: a table per entity kind plus an events table.

    Every table is keyed by the string attribute ``id``. A commit is a single
    TransactWriteItems call, so an entity write and its event either both
    land or neither does.
    """

    def __init__(self, table_prefix='taskboard', endpoint_url=None,
                 session=None):
        if not session:
            session = bsession.Session()
        self.ddb_client = session.client(
            service_name='dynamodb',
            endpoint_url=endpoint_url,
        )
        resource = session.resource(
            endpoint_url=endpoint_url,
            service_name='dynamodb'
        )
        self.table_names = pmap({
            entity_type: '{}_{}s'.format(
                table_prefix, entity_type.value.lower())
            for entity_type in EntityType
        })
        self.events_table_name = '{}_events'.format(table_prefix)
        self.tables = pmap({
            entity_type: resource.Table(name)
            for entity_type, name in self.table_names.items()
        })
        self.events_table = resource.Table(self.events_table_name)

    def find_by_id(self, entity_type, entity_id):
        entity_type = EntityType(entity_type)
        res = self.tables[entity_type].get_item(
            Key={'id': serialize_value(entity_id)},
            ConsistentRead=True,
        )
        item = res.get('Item')
        if not item:
            return None
        return record_from_row(entity_type, self._replace_decimals(item))

    def find_all(self, entity_type):
        entity_type = EntityType(entity_type)
        return pvector(
            record_from_row(entity_type, item)
            for item in self._scan(self.tables[entity_type])
        )

    def find_by(self, entity_type, field_name, value):
        entity_type = EntityType(entity_type)
        return pvector(
            record_from_row(entity_type, item)
            for item in self._scan(
                self.tables[entity_type],
                FilterExpression=Attr(field_name).eq(serialize_value(value)),
            )
        )

    def count(self, entity_type):
        table = self.tables[EntityType(entity_type)]
        total = 0
        kwargs = {'Select': 'COUNT', 'ConsistentRead': True}
        while True:
            res = table.scan(**kwargs)
            total += res['Count']
            if 'LastEvaluatedKey' not in res:
                return total
            kwargs['ExclusiveStartKey'] = res['LastEvaluatedKey']

    def read_events(self, entity_id=None):
        kwargs = {}
        if entity_id is not None:
            kwargs['FilterExpression'] = Attr('entity_id').eq(
                serialize_value(to_uuid(entity_id)))
        events = [
            Event.create(item)
            for item in self._scan(self.events_table, **kwargs)
        ]
        return pvector(sorted(events, key=lambda e: e.timestamp))

    def commit(self, writes):
        items = [self._transact_item(w) for w in writes]
        try:
            return self.ddb_client.transact_write_items(TransactItems=items)
        except ClientError:
            log.exception('Transaction of {} writes failed'.format(len(items)))
            raise

    def create_tables(self):
        """Create every table this storage uses, for local development"""
        names = [self.table_names[entity_type] for entity_type in EntityType]
        names.append(self.events_table_name)
        for name in names:
            self.ddb_client.create_table(
                TableName=name,
                KeySchema=[
                    {
                        'AttributeName': 'id',
                        'KeyType': 'HASH'
                    },
                ],
                AttributeDefinitions=[
                    {
                        'AttributeName': 'id',
                        'AttributeType': 'S'
                    },
                ],
                BillingMode='PAY_PER_REQUEST',
            )
        return names

    def _transact_item(self, write):
        if write.op == 'append':
            return {
                'Put': {
                    'TableName': self.events_table_name,
                    'Item': self._to_item(write.record.serialize())['M'],
                    # the event log is append only
                    'ConditionExpression': 'attribute_not_exists(id)',
                }
            }
        table_name = self.table_names[write.entity_type]
        if write.op == 'save':
            return {
                'Put': {
                    'TableName': table_name,
                    'Item': self._to_item(write.record.serialize())['M'],
                }
            }
        return {
            'Delete': {
                'TableName': table_name,
                'Key': {'id': {'S': serialize_value(write.entity_id)}},
            }
        }

    def _scan(self, table, **kwargs):
        # reads must see every committed transaction
        kwargs['ConsistentRead'] = True
        while True:
            res = table.scan(**kwargs)
            for item in res['Items']:
                yield self._replace_decimals(item)
            if 'LastEvaluatedKey' not in res:
                return
            kwargs['ExclusiveStartKey'] = res['LastEvaluatedKey']

    def _to_item(self, raw):
        if raw is None:
            return {
                'NULL': True
            }
        elif type(raw) is dict:
            return {
                'M': {k: self._to_item(v) for k, v in raw.items()}
            }
        elif type(raw) is list:
            return {
                'L': [self._to_item(i) for i in raw]
            }
        elif type(raw) is str:
            return {
                'S': raw
            }
        elif type(raw) is bool:
            return {
                'BOOL': raw
            }
        elif isinstance(raw, (int, float)):
            return {
                'N': str(raw)
            }
        raise TypeError(
            'Cannot convert {!r} of type {} to a DynamoDB value'.format(
                raw, type(raw)))

    def _replace_decimals(self, obj):
        if isinstance(obj, list):
            return [self._replace_decimals(x) for x in obj]
        elif isinstance(obj, dict):
            return {k: self._replace_decimals(v) for k, v in obj.items()}
        elif isinstance(obj, decimal.Decimal):
            return float(obj)
        else:
            return obj
