"""
Claim Operation Handler.
Assigns an open operation to the calling operator (Open -> InProgress).
POST /operations/{operationId}/claim
"""
from datetime import datetime, timezone
from botocore.exceptions import ClientError
from shared.dynamo import claim_operation, get_operation
from shared.errors import InvalidTransitionError
from shared.logging import logger, log_event
from shared.models import OperationStatus
from shared.auth import get_user_sub
from shared.utils import format_response, get_path_param, to_iso


def handler(event, context):
    log_event(event)

    operation_id = get_path_param(event, 'operationId')
    operator_id = get_user_sub(event)
    if not operator_id:
        return format_response(401, {'message': 'Unauthorized'})
    if not operation_id:
        return format_response(400, {'message': 'Missing operationId'})

    try:
        operation = get_operation(operation_id)
        if not operation:
            return format_response(404, {'message': 'Operation not found'})

        if operation.status != OperationStatus.OPEN:
            return format_response(409, {'message': 'Operation is not available for claiming'})

        timestamp = to_iso(datetime.now(timezone.utc))
        claim_operation(operation_id, operator_id, timestamp)

        return format_response(200, {
            'message': 'Operation claimed successfully',
            'operationId': operation_id,
            'status': OperationStatus.IN_PROGRESS,
            'claimedAt': timestamp
        })

    except InvalidTransitionError:
        # Lost the race to another operator
        return format_response(409, {'message': 'Operation is no longer available or already claimed.'})
    except ClientError as e:
        logger.error(f"Error claiming operation {operation_id}: {e}")
        return format_response(500, {'message': 'Internal Server Error'})
