"""
Error taxonomy surfaced by the user purge workflow.

Every failure that reaches the request boundary is a UserDeletionError; its
``tag`` is returned to the caller and its ``status_code`` selects the response
class.
"""

from typing import List, Optional

from .core import StageResult


class UserDeletionError(Exception):
    """Base exception for user deletion failures."""
    tag = 'InternalError'
    status_code = 500

    def __init__(self, message: str, stages: Optional[List[StageResult]] = None):
        super().__init__(message)
        self.stages = stages or []


class BadRequestError(UserDeletionError):
    """Request is missing a usable user identifier."""
    tag = 'BadRequest'
    status_code = 400


class NotFoundError(UserDeletionError):
    """No profile record exists for the identifier."""
    tag = 'NotFound'


class IdentityNotFoundError(NotFoundError):
    """Identity directory has no account for the identifier."""
    tag = 'IdentityNotFound'
    status_code = 404


class DataIntegrityError(UserDeletionError):
    """Profile record lacks the contact address."""
    tag = 'DataIntegrity'


class QueryFailedError(UserDeletionError):
    """A lookup against the data store failed."""
    tag = 'QueryFailed'


class IdentityDeleteFailedError(UserDeletionError):
    """Identity directory refused or failed the account deletion."""
    tag = 'IdentityDeleteFailed'


class CascadeDeleteFailedError(UserDeletionError):
    """At least one dependent record deletion failed.

    Deletions issued before the failure are not rolled back; ``completed`` is
    the number known to have succeeded and is only meant for logs.
    """
    tag = 'CascadeDeleteFailed'

    def __init__(self, message: str, completed: int = 0, stages: Optional[List[StageResult]] = None):
        super().__init__(message, stages)
        self.completed = completed


class ProfileDeleteFailedError(UserDeletionError):
    """Final profile record deletion failed."""
    tag = 'ProfileDeleteFailed'


class ConfigurationError(UserDeletionError):
    """Required configuration is missing."""
    tag = 'ConfigurationError'
