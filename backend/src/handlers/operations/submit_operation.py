"""
Submit Operation Handler.
Sends an in-progress operation for review (InProgress -> UnderReview).
POST /operations/{operationId}/submit
Body: { "notes": "..." } (optional)
"""
from datetime import datetime, timezone
from botocore.exceptions import ClientError
from shared.dynamo import get_operation, transition_operation
from shared.errors import InvalidTransitionError
from shared.logging import logger, log_event
from shared.models import OperationStatus
from shared.auth import get_user_sub
from shared.utils import format_response, get_path_param, parse_body, to_iso

MAX_NOTES_LENGTH = 2000


def handler(event, context):
    log_event(event)

    operation_id = get_path_param(event, 'operationId')
    operator_id = get_user_sub(event)
    if not operator_id:
        return format_response(401, {'message': 'Unauthorized'})
    if not operation_id:
        return format_response(400, {'message': 'Missing operationId'})

    notes = parse_body(event).get('notes')
    if notes is not None and (not isinstance(notes, str) or len(notes) > MAX_NOTES_LENGTH):
        return format_response(400, {'message': f'notes must be a string of at most {MAX_NOTES_LENGTH} characters'})

    try:
        operation = get_operation(operation_id)
        if not operation:
            return format_response(404, {'message': 'Operation not found'})

        if operation.assignee_id != operator_id:
            return format_response(403, {'message': 'Operation not assigned to this operator'})

        timestamp = to_iso(datetime.now(timezone.utc))
        extra = {'submittedAt': timestamp, 'updatedAt': timestamp}
        if notes:
            extra['submissionNotes'] = notes

        transition_operation(
            operation_id,
            operation.status,
            OperationStatus.UNDER_REVIEW,
            extra=extra,
            assignee_id=operator_id
        )

        return format_response(200, {
            'message': 'Operation submitted for review',
            'operationId': operation_id,
            'status': OperationStatus.UNDER_REVIEW,
            'submittedAt': timestamp
        })

    except InvalidTransitionError as e:
        return format_response(409, {'message': str(e)})
    except ClientError as e:
        logger.error(f"Error submitting operation {operation_id}: {e}")
        return format_response(500, {'message': 'Internal Server Error'})
