"""
Amazon Cognito user pool client wrapper for account removal.
"""

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from .config import CognitoConfig
from .logging_config import get_logger

logger = get_logger(__name__)


class CognitoError(Exception):
    """Custom exception for Cognito errors."""
    pass


class CognitoUserNotFoundError(CognitoError):
    """Raised when the user pool has no account with the given username."""
    pass


class CognitoClient:
    """Cognito Identity Provider client scoped to a single user pool."""

    def __init__(self, config: CognitoConfig):
        """
        Initialize Cognito client.

        Args:
            config: CognitoConfig instance with the user pool to operate on
        """
        self.config = config
        self.user_pool_id = config.user_pool_id
        self.client = boto3.client('cognito-idp', region_name=config.region)

        logger.info(f'Initialized Cognito client for user pool: {self.user_pool_id}')

    def delete_account(self, username: str) -> None:
        """
        Delete an account from the user pool.

        Args:
            username: Directory username of the account

        Raises:
            CognitoUserNotFoundError: If the account does not exist
            CognitoError: If the deletion fails for any other reason
        """
        try:
            self.client.admin_delete_user(UserPoolId=self.user_pool_id, Username=username)
            logger.debug(f'Deleted Cognito account {username}')

        except ClientError as e:
            if e.response.get('Error', {}).get('Code') == 'UserNotFoundException':
                logger.warning(f'Cognito account {username} not found in {self.user_pool_id}')
                raise CognitoUserNotFoundError(f'User {username} not found in identity directory')
            logger.error(f'Cognito deletion of {username} failed: {e}')
            raise CognitoError(f'Identity directory deletion failed: {e}')
        except BotoCoreError as e:
            logger.error(f'Cognito deletion of {username} failed: {e}')
            raise CognitoError(f'Identity directory deletion failed: {e}')

    def health_check(self) -> bool:
        """
        Check that the configured user pool is reachable.

        Returns:
            True if the user pool can be described, False otherwise
        """
        try:
            self.client.describe_user_pool(UserPoolId=self.user_pool_id)
            return True

        except Exception as e:
            logger.error(f'Cognito health check failed: {e}')
            return False
