"""
List Recommended Operations Handler.
Returns open operations matching the operator's skills, most urgent first.
GET /operations/recommended?limit=20&category=...&priority=...&search=...&all=true
"""
from botocore.exceptions import ClientError
from shared.config import config
from shared.dynamo import get_operator, list_operations
from shared.logging import logger, log_event
from shared.models import OperationStatus
from shared.recommendations import board, select
from shared.auth import get_user_sub
from shared.utils import format_response, get_query_param


def handler(event, context):
    log_event(event)

    operator_id = get_user_sub(event)
    if not operator_id:
        return format_response(401, {'message': 'Unauthorized'})

    try:
        limit = int(get_query_param(event, 'limit', config.DEFAULT_OPERATION_LIMIT))
    except (TypeError, ValueError):
        return format_response(400, {'message': 'limit must be an integer'})
    if limit <= 0:
        return format_response(400, {'message': 'limit must be positive'})

    try:
        operator = get_operator(operator_id)
        if not operator:
            return format_response(404, {'message': 'Operator profile not found'})

        operations = list_operations(status=OperationStatus.OPEN, limit=limit)

        # ?all=true shows the whole board instead of skill matches only
        show_all = (get_query_param(event, 'all', 'false') or '').lower() == 'true'
        filters = {
            'category': get_query_param(event, 'category'),
            'priority': get_query_param(event, 'priority'),
            'search': get_query_param(event, 'search')
        }
        if show_all or any(filters.values()):
            ordered = board(operations, operator.skills, recommended_only=not show_all, **filters)
        else:
            ordered = select(operations, operator.skills)

        processed = []
        for operation in ordered:
            item = operation.to_item()
            item['skillMatch'] = sorted(operation.required_skills & operator.skills)
            item['timeRemaining'] = operation.time_remaining()
            item['overdue'] = operation.is_overdue()
            processed.append(item)

        return format_response(200, {
            'operations': processed,
            'operatorRank': operator.rank,
            'totalOperations': len(operations),
            'recommendedOperations': len([op for op in processed if op['skillMatch']])
        })

    except ClientError as e:
        logger.error(f"Error listing recommended operations: {e}")
        return format_response(500, {'message': 'Internal Server Error'})
