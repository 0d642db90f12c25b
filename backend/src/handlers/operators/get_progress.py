"""
Get Operator Progress Handler.
GET /operators/me/progress
"""
from botocore.exceptions import ClientError
from shared.dynamo import get_operator
from shared.logging import logger, log_event
from shared.ranks import get_achievement, get_rank_progress
from shared.auth import get_user_sub
from shared.utils import format_response


def handler(event, context):
    log_event(event)

    operator_id = get_user_sub(event)
    if not operator_id:
        return format_response(401, {'message': 'Unauthorized'})

    try:
        operator = get_operator(operator_id)
        if not operator:
            return format_response(404, {'message': 'Operator profile not found'})

        return format_response(200, {
            'operatorId': operator_id,
            'activeOps': operator.active_ops,
            'progress': get_rank_progress(operator.xp),
            'achievement': get_achievement(operator.xp)
        })

    except ClientError as e:
        logger.error(f"Error getting progress for {operator_id}: {e}")
        return format_response(500, {'message': 'Internal Server Error'})
