"""
Configuration management for AWS services and application settings.
"""

import os
from dataclasses import dataclass

from dotenv import load_dotenv

load_dotenv()


@dataclass
class CognitoConfig:
    """Configuration for the Amazon Cognito user pool."""
    region: str
    user_pool_id: str


@dataclass
class DynamoDBConfig:
    """Configuration for Amazon DynamoDB tables and indexes."""
    region: str
    users_table: str
    conversations_table: str
    threads_table: str
    users_id_index: str
    conversations_account_index: str
    threads_account_index: str
    max_attempts: int
    connect_timeout: float
    read_timeout: float


@dataclass
class CascadeConfig:
    """Configuration for dependent record deletion."""
    max_workers: int


@dataclass
class CorsConfig:
    """Configuration for the CORS header provider function."""
    region: str
    function_name: str


@dataclass
class AppConfig:
    """Main application configuration."""
    environment: str
    log_level: str
    cognito: CognitoConfig
    dynamodb: DynamoDBConfig
    cascade: CascadeConfig
    cors: CorsConfig


def load_config() -> AppConfig:
    """Load configuration from environment variables with defaults."""
    environment = os.getenv('ENVIRONMENT', 'development')
    region = os.getenv('AWS_REGION', 'us-east-2')

    # Cognito configuration
    cognito_config = CognitoConfig(region=region, user_pool_id=os.getenv('COGNITO_USER_POOL_ID', ''))

    # DynamoDB configuration
    dynamodb_config = DynamoDBConfig(region=region,
                                     users_table=os.getenv('USERS_TABLE', 'Users'),
                                     conversations_table=os.getenv('CONVERSATIONS_TABLE', 'Conversations'),
                                     threads_table=os.getenv('THREADS_TABLE', 'Threads'),
                                     users_id_index=os.getenv('USERS_ID_INDEX', 'id-index'),
                                     conversations_account_index=os.getenv('CONVERSATIONS_ACCOUNT_INDEX',
                                                                           'associated_account-is_first_email-index'),
                                     threads_account_index=os.getenv('THREADS_ACCOUNT_INDEX', 'associated_account-index'),
                                     max_attempts=int(os.getenv('DYNAMODB_MAX_ATTEMPTS', '3')),
                                     connect_timeout=float(os.getenv('DYNAMODB_CONNECT_TIMEOUT', '5')),
                                     read_timeout=float(os.getenv('DYNAMODB_READ_TIMEOUT', '30')))

    # Cascade configuration
    cascade_config = CascadeConfig(max_workers=int(os.getenv('CASCADE_MAX_WORKERS', '16')))

    # CORS configuration
    cors_config = CorsConfig(region=region, function_name=os.getenv('CORS_FUNCTION_NAME', 'Allow-Cors'))

    return AppConfig(environment=environment,
                     log_level=os.getenv('LOG_LEVEL', 'INFO'),
                     cognito=cognito_config,
                     dynamodb=dynamodb_config,
                     cascade=cascade_config,
                     cors=cors_config)


# Global configuration instance
config = load_config()
