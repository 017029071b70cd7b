"""
Process-wide AWS clients shared by every invocation of the function.
"""

from dataclasses import dataclass
from typing import Any, List, Optional

from ..models.errors import ConfigurationError
from ..utils.cognito_client import CognitoClient
from ..utils.config import AppConfig
from ..utils.config import config as default_config
from ..utils.cors import LambdaCorsProvider, StaticCorsProvider
from ..utils.dynamodb_client import DynamoDBClient
from ..utils.logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ServiceContext:
    """Clients created once per process and reused across invocations."""
    config: AppConfig
    directory: Any  # CognitoClient or anything with delete_account(username)
    store: Any  # DynamoDBClient or anything with query_by_index / delete_by_key
    cors_providers: List[Any]


_context: Optional[ServiceContext] = None


def build_service_context(config: Optional[AppConfig] = None) -> ServiceContext:
    """Create the AWS clients for the given configuration.

    Raises:
        ConfigurationError: If no Cognito user pool is configured
    """
    config = config or default_config
    if not config.cognito.user_pool_id:
        raise ConfigurationError('Missing required env var: COGNITO_USER_POOL_ID')

    context = ServiceContext(config=config,
                             directory=CognitoClient(config.cognito),
                             store=DynamoDBClient(config.dynamodb),
                             cors_providers=[LambdaCorsProvider(config.cors), StaticCorsProvider()])
    logger.info(f'Built service context for environment: {config.environment}')
    return context


def get_service_context() -> ServiceContext:
    """Return the process-wide context, building it on first use."""
    global _context
    if _context is None:
        _context = build_service_context()
    return _context
