"""
Complete Operation Handler.
A reviewer approves an operation under review: the assignee is awarded XP and
tokens and the operation is marked Completed.
POST /operations/{operationId}/complete

The completion time used for the deadline bonus is the stored submittedAt
(when the assignee handed the work in), falling back to now. It is never
taken from the request.
"""
from botocore.exceptions import ClientError
from shared.dynamo import complete_operation_persister, get_operation, get_operator
from shared.errors import ConfigurationError
from shared.logging import logger, log_event
from shared.models import OperationStatus
from shared.progression import award
from shared.ranks import get_achievement
from shared.auth import get_user_sub, is_reviewer
from shared.utils import format_response, get_path_param


def handler(event, context):
    log_event(event)

    operation_id = get_path_param(event, 'operationId')
    reviewer_id = get_user_sub(event)
    if not reviewer_id:
        return format_response(401, {'message': 'Unauthorized'})
    if not is_reviewer(event):
        return format_response(403, {'message': 'Only reviewers can complete operations'})
    if not operation_id:
        return format_response(400, {'message': 'Missing operationId'})

    try:
        operation = get_operation(operation_id)
        if not operation:
            return format_response(404, {'message': 'Operation not found'})

        if operation.assignee_id == reviewer_id:
            return format_response(403, {'message': 'Operators cannot complete their own operations'})

        if operation.status != OperationStatus.UNDER_REVIEW:
            return format_response(409, {'message': 'Operation must be under review to complete'})

        operator = get_operator(operation.assignee_id) if operation.assignee_id else None
        if not operator:
            return format_response(404, {'message': 'Assigned operator not found'})

        result = award(
            operator,
            operation,
            complete_operation_persister(operation_id),
            completion_time=operation.submitted_at
        )
        logger.info(f"Operation {operation_id} approved by reviewer {reviewer_id}")

        return format_response(200, {
            'award': result.to_dict(),
            'achievement': get_achievement(result.new_total_xp)
        })

    except ConfigurationError as e:
        logger.error(f"Operation {operation_id} has invalid reward configuration: {e}")
        return format_response(500, {'message': str(e)})
    except ClientError as e:
        if e.response['Error']['Code'] == 'TransactionCanceledException':
            # Already completed by a concurrent request
            return format_response(409, {'message': 'Operation was already completed'})
        logger.error(f"Error completing operation {operation_id}: {e}")
        return format_response(500, {'message': 'Internal Server Error'})
