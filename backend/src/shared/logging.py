"""
Logging for the operator network handlers and engine.

Everything logs through the 'operator_network' logger (or a child of it from
get_logger), configured once per Lambda container.
"""
import logging
import json

from .config import config

LOGGER_NAME = 'operator_network'
LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

# Event keys that may carry credentials or user-submitted content
REDACTED_EVENT_KEYS = ('body', 'headers', 'multiValueHeaders')


def configure_logger(name: str = LOGGER_NAME, level: str = config.LOG_LEVEL) -> logging.Logger:
    """Return the named logger with a stream handler attached exactly once."""
    configured = logging.getLogger(name)
    configured.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not configured.handlers:
        stream = logging.StreamHandler()
        stream.setFormatter(logging.Formatter(LOG_FORMAT))
        configured.addHandler(stream)

    return configured


def get_logger(component: str) -> logging.Logger:
    """Child logger for one component, e.g. get_logger('dynamo')."""
    return logger.getChild(component)


logger = configure_logger()


def log_event(event: dict) -> None:
    """Log an incoming Lambda event with bodies, headers and authorizer claims stripped."""
    try:
        safe_event = {k: v for k, v in event.items() if k not in REDACTED_EVENT_KEYS}
        request_context = safe_event.get('requestContext')
        if isinstance(request_context, dict) and 'authorizer' in request_context:
            safe_event['requestContext'] = {
                **request_context, 'authorizer': '<redacted>'
            }
        logger.info(f"Lambda event: {json.dumps(safe_event, default=str)}")
    except (TypeError, ValueError, AttributeError) as e:
        logger.warning(f"Could not log event: {e}")
