"""
Configuration module for Lambda handlers.
Loads all environment variables needed by the operator network.
"""
import os


class Config:
    """Centralized configuration from environment variables."""

    # AWS Region
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')

    # DynamoDB Tables
    OPERATIONS_TABLE = os.environ.get('OPERATIONS_TABLE', '')
    OPERATORS_TABLE = os.environ.get('OPERATORS_TABLE', '')

    # DynamoDB Indexes
    OPERATIONS_STATUS_INDEX = os.environ.get('OPERATIONS_STATUS_INDEX', 'StatusIndex')

    # Operation board
    DEFAULT_OPERATION_LIMIT = int(os.environ.get('DEFAULT_OPERATION_LIMIT', '20'))

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')


config = Config()
