"""
Health check utilities for the application.
"""

from typing import Any, Dict, Optional

from .cognito_client import CognitoClient
from .config import AppConfig
from .config import config as default_config
from .dynamodb_client import DynamoDBClient
from .logging_config import get_logger

logger = get_logger(__name__)


def check_health(config: Optional[AppConfig] = None) -> bool:
    """Check the health of all system components.

    Returns:
        True if all components are healthy, False otherwise
    """
    try:
        health_status = get_health_status(config)

        # Check if all components are healthy
        all_healthy = all(status.get('healthy', False) for status in health_status.values())

        if all_healthy:
            logger.info('All system components are healthy')
        else:
            logger.warning('Some system components are unhealthy')

        return all_healthy

    except Exception as e:
        logger.error(f'Health check failed: {e}')
        return False


def get_health_status(config: Optional[AppConfig] = None) -> Dict[str, Any]:
    """Get detailed health status of all components.

    Returns:
        Dictionary with health status of each component
    """
    config = config or default_config
    health_status = {}

    # Check DynamoDB tables
    try:
        dynamodb = DynamoDBClient(config.dynamodb)
        for name, table in (('users', config.dynamodb.users_table), ('conversations', config.dynamodb.conversations_table),
                            ('threads', config.dynamodb.threads_table)):
            health_status[f'dynamodb_{name}'] = {
                'healthy': dynamodb.health_check(table),
                'service': 'Amazon DynamoDB',
                'table': table
            }
    except Exception as e:
        health_status['dynamodb'] = {'healthy': False, 'service': 'Amazon DynamoDB', 'error': str(e)}

    # Check Cognito
    try:
        if not config.cognito.user_pool_id:
            raise ValueError('COGNITO_USER_POOL_ID is not set')
        cognito = CognitoClient(config.cognito)
        health_status['cognito'] = {
            'healthy': cognito.health_check(),
            'service': 'Amazon Cognito',
            'user_pool_id': config.cognito.user_pool_id
        }
    except Exception as e:
        health_status['cognito'] = {'healthy': False, 'service': 'Amazon Cognito', 'error': str(e)}

    return health_status


def get_system_info(config: Optional[AppConfig] = None) -> Dict[str, Any]:
    """Get system information and configuration.

    Returns:
        Dictionary with system information
    """
    config = config or default_config
    return {
        'service_name': 'UserPurge',
        'version': '1.0.0',
        'configuration': {
            'environment': config.environment,
            'users_table': config.dynamodb.users_table,
            'conversations_table': config.dynamodb.conversations_table,
            'threads_table': config.dynamodb.threads_table,
            'cascade_max_workers': config.cascade.max_workers,
            'aws_region': config.dynamodb.region
        },
        'health_status': get_health_status(config)
    }
