"""
Configuration module for the marketplace.
Loads all environment variables needed by the handlers and the store.
"""
import os


class Config:
    """Centralized configuration from environment variables."""

    # Logging
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO').upper()

    # AWS Region
    AWS_REGION = os.environ.get('AWS_REGION', 'us-east-1')

    # DynamoDB Tables
    USERS_TABLE = os.environ.get('USERS_TABLE', '')
    JOBS_TABLE = os.environ.get('JOBS_TABLE', '')
    UNIQUES_TABLE = os.environ.get('UNIQUES_TABLE', '')  # Sentinel items for unique attributes (email)

    # Local DynamoDB (e.g. dynamodb-local); empty means the regional endpoint
    DYNAMODB_ENDPOINT_URL = os.environ.get('DYNAMODB_ENDPOINT_URL', '')

    # Discovery
    DEFAULT_PAGE_SIZE = int(os.environ.get('DEFAULT_PAGE_SIZE', '10'))
    MAX_PAGE_SIZE = int(os.environ.get('MAX_PAGE_SIZE', '50'))
    LEADERBOARD_SIZE = int(os.environ.get('LEADERBOARD_SIZE', '10'))

    # Job creation: refuse to assign jobs to disabled workers
    REJECT_DISABLED_WORKERS = os.environ.get('REJECT_DISABLED_WORKERS', 'false').lower() == 'true'


config = Config()
