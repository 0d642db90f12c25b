"""
DynamoDB collaborators: operation source and operator profile persistence.
"""
import boto3
from typing import List, Dict, Any, Optional, Tuple
from boto3.dynamodb.conditions import Key, Attr
from boto3.dynamodb.types import TypeSerializer
from botocore.exceptions import ClientError
from .config import config
from .errors import InvalidTransitionError
from .logging import get_logger
from .models import Operation, OperationStatus, OperatorProfile
from .workflow import validate_transition

dynamodb = boto3.resource('dynamodb', region_name=config.AWS_REGION)
serializer = TypeSerializer()
logger = get_logger('dynamo')


def _set_expression(fields: Dict[str, Any], prefix: str = 'f') -> Tuple[str, Dict[str, str], Dict[str, Any]]:
    """
    Build a SET update expression for the given fields.

    Every attribute goes through an expression name so reserved words
    (status, rank, ...) are safe.
    """
    assignments = []
    names = {}
    values = {}
    for index, (name, value) in enumerate(fields.items()):
        names[f'#{prefix}{index}'] = name
        values[f':{prefix}{index}'] = value
        assignments.append(f'#{prefix}{index} = :{prefix}{index}')
    return 'SET ' + ', '.join(assignments), names, values


def _serialize(values: Dict[str, Any]) -> Dict[str, Any]:
    return {k: serializer.serialize(v) for k, v in values.items()}


def list_operations(status: Optional[str] = None, limit: Optional[int] = None) -> List[Operation]:
    """
    Read a snapshot of operations, optionally by status and capped at limit.

    Args:
        status: Only return operations in this status (uses the status GSI)
        limit: Max items to return

    Returns:
        List of Operation values
    """
    table = dynamodb.Table(config.OPERATIONS_TABLE)

    params = {}
    if limit:
        params['Limit'] = limit

    try:
        if status:
            response = table.query(
                IndexName=config.OPERATIONS_STATUS_INDEX,
                KeyConditionExpression=Key('status').eq(status),
                **params
            )
        else:
            response = table.scan(**params)
    except ClientError as e:
        logger.error(f"Error reading operations from {config.OPERATIONS_TABLE}: {e}")
        raise

    return [Operation.from_item(item) for item in response.get('Items', [])]


def get_operation(operation_id: str) -> Optional[Operation]:
    """Get a single operation, or None if it does not exist."""
    table = dynamodb.Table(config.OPERATIONS_TABLE)
    response = table.get_item(Key={'operationId': operation_id})
    item = response.get('Item')
    return Operation.from_item(item) if item else None


def get_operator(operator_id: str) -> Optional[OperatorProfile]:
    """Get a single operator profile, or None if it does not exist."""
    table = dynamodb.Table(config.OPERATORS_TABLE)
    response = table.get_item(Key={'operatorId': operator_id})
    item = response.get('Item')
    return OperatorProfile.from_item(item) if item else None


def update_operator(operator_id: str, delta: Dict[str, Any]) -> None:
    """
    Write a partial profile delta, last-write-wins on the given fields.

    Raises:
        ClientError: the update failed
    """
    table = dynamodb.Table(config.OPERATORS_TABLE)
    expression, names, values = _set_expression(delta)

    try:
        table.update_item(
            Key={'operatorId': operator_id},
            UpdateExpression=expression,
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=values
        )
    except ClientError as e:
        logger.error(f"Error updating operator {operator_id}: {e}")
        raise


def transition_operation(
    operation_id: str,
    from_status: str,
    to_status: str,
    extra: Optional[Dict[str, Any]] = None,
    assignee_id: Optional[str] = None
) -> None:
    """
    Move an operation between statuses, guarded by its current status.

    Args:
        operation_id: The operation to update
        from_status: Status the operation must currently be in
        to_status: Target status
        extra: Additional attributes to set in the same write
        assignee_id: When given, the operation must be assigned to this operator

    Raises:
        InvalidTransitionError: the workflow forbids the move, or the stored
            operation is no longer in from_status (or has another assignee)
    """
    validate_transition(from_status, to_status)

    table = dynamodb.Table(config.OPERATIONS_TABLE)
    fields = {'status': to_status}
    fields.update(extra or {})
    expression, names, values = _set_expression(fields)

    condition = Attr('status').eq(from_status)
    if assignee_id:
        condition = condition & Attr('assigneeId').eq(assignee_id)

    try:
        table.update_item(
            Key={'operationId': operation_id},
            UpdateExpression=expression,
            ConditionExpression=condition,
            ExpressionAttributeNames=names,
            ExpressionAttributeValues=values
        )
    except ClientError as e:
        if e.response['Error']['Code'] == 'ConditionalCheckFailedException':
            raise InvalidTransitionError(from_status, to_status) from e
        logger.error(f"Error moving operation {operation_id} to {to_status}: {e}")
        raise

    logger.info(f"Operation {operation_id}: {from_status} -> {to_status}")


def claim_operation(operation_id: str, operator_id: str, timestamp: str) -> None:
    """
    Assign an open operation to an operator and count it as active.

    Both writes happen in one transaction so the operation cannot be
    claimed twice.

    Raises:
        InvalidTransitionError: the operation is no longer Open
    """
    validate_transition(OperationStatus.OPEN, OperationStatus.IN_PROGRESS)

    try:
        dynamodb.meta.client.transact_write_items(
            TransactItems=[
                {
                    'Update': {
                        'TableName': config.OPERATIONS_TABLE,
                        'Key': {'operationId': {'S': operation_id}},
                        'UpdateExpression': 'SET #status = :in_progress, assigneeId = :operator, claimedAt = :ts, updatedAt = :ts',
                        'ConditionExpression': '#status = :open AND attribute_not_exists(assigneeId)',
                        'ExpressionAttributeNames': {'#status': 'status'},
                        'ExpressionAttributeValues': {
                            ':open': {'S': OperationStatus.OPEN},
                            ':in_progress': {'S': OperationStatus.IN_PROGRESS},
                            ':operator': {'S': operator_id},
                            ':ts': {'S': timestamp}
                        }
                    }
                },
                {
                    'Update': {
                        'TableName': config.OPERATORS_TABLE,
                        'Key': {'operatorId': {'S': operator_id}},
                        'UpdateExpression': 'ADD activeOps :one SET updatedAt = :ts, lastActive = :ts',
                        'ConditionExpression': 'attribute_exists(operatorId)',
                        'ExpressionAttributeValues': {
                            ':one': {'N': '1'},
                            ':ts': {'S': timestamp}
                        }
                    }
                }
            ]
        )
    except ClientError as e:
        if e.response['Error']['Code'] == 'TransactionCanceledException':
            # Typically another operator won the race for the operation
            raise InvalidTransitionError(OperationStatus.OPEN, OperationStatus.IN_PROGRESS) from e
        logger.error(f"Error claiming operation {operation_id}: {e}")
        raise

    logger.info(f"Operation {operation_id} claimed by operator {operator_id}")


def complete_operation_persister(operation_id: str):
    """
    Build a persistence collaborator for completing an operation.

    The returned persist(operator_id, delta) writes the profile delta and
    moves the operation from UnderReview to Completed in one transaction.
    A second completion of the same operation fails its status condition,
    so the profile is never credited twice.
    """
    validate_transition(OperationStatus.UNDER_REVIEW, OperationStatus.COMPLETED)

    def persist(operator_id: str, delta: Dict[str, Any]) -> None:
        expression, names, values = _set_expression(delta)

        try:
            dynamodb.meta.client.transact_write_items(
                TransactItems=[
                    {
                        'Update': {
                            'TableName': config.OPERATORS_TABLE,
                            'Key': {'operatorId': {'S': operator_id}},
                            'UpdateExpression': expression,
                            'ExpressionAttributeNames': names,
                            'ExpressionAttributeValues': _serialize(values)
                        }
                    },
                    {
                        'Update': {
                            'TableName': config.OPERATIONS_TABLE,
                            'Key': {'operationId': {'S': operation_id}},
                            'UpdateExpression': 'SET #status = :completed, completedAt = :ts, updatedAt = :ts',
                            'ConditionExpression': '#status = :under_review AND assigneeId = :operator',
                            'ExpressionAttributeNames': {'#status': 'status'},
                            'ExpressionAttributeValues': {
                                ':under_review': {'S': OperationStatus.UNDER_REVIEW},
                                ':completed': {'S': OperationStatus.COMPLETED},
                                ':operator': {'S': operator_id},
                                ':ts': {'S': delta['updatedAt']}
                            }
                        }
                    }
                ]
            )
        except ClientError as e:
            logger.error(f"Error completing operation {operation_id} for operator {operator_id}: {e}")
            raise

    return persist
