"""
User Deletion Service removing a user from Cognito and DynamoDB, cascading to dependent records.
"""

from collections import Counter
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from typing import Any, Callable, Dict, List, Optional

from ..models.core import DeletionOutcome, DependentCollection, DependentRecord, Stage, StageResult, UserProfile
from ..models.errors import (BadRequestError, CascadeDeleteFailedError, DataIntegrityError, IdentityDeleteFailedError,
                             IdentityNotFoundError, NotFoundError, ProfileDeleteFailedError, QueryFailedError,
                             UserDeletionError)
from ..utils.cognito_client import CognitoError, CognitoUserNotFoundError
from ..utils.dynamodb_client import DynamoDBError
from ..utils.logging_config import get_logger
from .context import ServiceContext

logger = get_logger(__name__)


class UserDeletionService:
    """Forward-only pipeline deleting a user everywhere.

    Stages run in order Resolve, DeleteIdentity, Collect, CascadeDelete and
    DeleteProfile. The first failing stage ends the run; completed stages are
    not undone.
    """

    def __init__(self, context: ServiceContext):
        """Initialize the user deletion service.

        Args:
            context: Shared clients and configuration
        """
        self.directory = context.directory
        self.store = context.store
        self.dynamodb_config = context.config.dynamodb
        self.max_workers = max(1, context.config.cascade.max_workers)

        # (table, index) per dependent collection
        self.collection_tables = {
            DependentCollection.CONVERSATIONS: (self.dynamodb_config.conversations_table,
                                                self.dynamodb_config.conversations_account_index),
            DependentCollection.THREADS: (self.dynamodb_config.threads_table, self.dynamodb_config.threads_account_index),
        }

    def delete_user(self, user_id: str) -> DeletionOutcome:
        """Delete a user's identity account, dependent records and profile.

        Args:
            user_id: User identifier, also the identity directory username

        Returns:
            DeletionOutcome with the number of conversation and thread records removed

        Raises:
            UserDeletionError: Subclass naming the first stage failure; its
                ``stages`` holds the outcome of every stage that ran
        """
        if not isinstance(user_id, str) or not user_id.strip():
            raise BadRequestError('Missing required field: id')

        stages: List[StageResult] = []
        logger.info(f'Starting deletion of user {user_id}')

        profile = self._run_stage(stages, Stage.RESOLVE, self.resolve_profile, user_id)
        self._run_stage(stages, Stage.DELETE_IDENTITY, self.delete_identity, profile.id)

        collected = self._run_stage(stages,
                                    Stage.COLLECT,
                                    self.collect_dependents,
                                    user_id,
                                    describe=lambda found: ', '.join(f'{c.name.lower()}={len(r)}' for c, r in found.items()))
        records = [record for collection in DependentCollection for record in collected[collection]]

        counts = self._run_stage(stages,
                                 Stage.CASCADE_DELETE,
                                 self.cascade_delete,
                                 records,
                                 describe=lambda deleted: f'{sum(deleted.values())} records deleted')
        self._run_stage(stages, Stage.DELETE_PROFILE, self.delete_profile, user_id)

        outcome = DeletionOutcome(user_id=user_id,
                                  conversations=counts[DependentCollection.CONVERSATIONS],
                                  threads=counts[DependentCollection.THREADS],
                                  stages=stages)
        logger.info(f'Deleted user {user_id} with {outcome.conversations} conversations and {outcome.threads} threads')
        return outcome

    def _run_stage(self,
                   stages: List[StageResult],
                   stage: Stage,
                   func: Callable[..., Any],
                   *args: Any,
                   describe: Optional[Callable[[Any], str]] = None) -> Any:
        """Run one stage, appending its StageResult and attaching the log to failures."""
        try:
            result = func(*args)
        except UserDeletionError as e:
            stages.append(StageResult(stage=stage, succeeded=False, detail=str(e), error=e.tag))
            e.stages = stages
            completed = [s.stage.value for s in stages if s.succeeded]
            logger.error(f'Stage {stage.value} failed with {e.tag}: {e} (completed stages: {completed or "none"})')
            raise

        detail = describe(result) if describe else ''
        stages.append(StageResult(stage=stage, succeeded=True, detail=detail))
        logger.debug(f'Stage {stage.value} succeeded {detail}'.rstrip())
        return result

    def resolve_profile(self, user_id: str) -> UserProfile:
        """Look up the profile record through the id index.

        Args:
            user_id: User identifier

        Returns:
            UserProfile of the first matching record

        Raises:
            NotFoundError: If no profile record matches
            DataIntegrityError: If the record has no email
            QueryFailedError: If the lookup fails
        """
        try:
            items = self.store.query_by_index(self.dynamodb_config.users_table, self.dynamodb_config.users_id_index, 'id',
                                              user_id)
        except DynamoDBError as e:
            raise QueryFailedError(f'User lookup failed: {e}')
        except Exception as e:
            logger.error(f'Unexpected error during user lookup: {e}')
            raise QueryFailedError(f'User lookup failed: {e}')

        if not items:
            raise NotFoundError('User not found in database')

        item = items[0]
        email = item.get('email')
        if not isinstance(email, str) or not email:
            raise DataIntegrityError('User email not found in user record')

        return UserProfile(id=user_id, email=email)

    def delete_identity(self, user_id: str) -> None:
        """Remove the identity directory account whose username is the user identifier.

        Raises:
            IdentityNotFoundError: If the directory has no such account
            IdentityDeleteFailedError: If the directory deletion fails otherwise
        """
        try:
            self.directory.delete_account(user_id)
        except CognitoUserNotFoundError as e:
            raise IdentityNotFoundError(str(e))
        except CognitoError as e:
            raise IdentityDeleteFailedError(str(e))
        except Exception as e:
            logger.error(f'Unexpected error during identity deletion: {e}')
            raise IdentityDeleteFailedError(f'Identity directory deletion failed: {e}')

    def collect_dependents(self, user_id: str) -> Dict[DependentCollection, List[DependentRecord]]:
        """Query every dependent collection for records associated with the user.

        Both collections are queried concurrently; either failing aborts the
        collection.

        Raises:
            QueryFailedError: If a query fails or returns a record without its key
        """
        with ThreadPoolExecutor(max_workers=len(DependentCollection)) as executor:
            futures = {
                collection: executor.submit(self._collect, collection, user_id)
                for collection in DependentCollection
            }
            return {collection: future.result() for collection, future in futures.items()}

    def _collect(self, collection: DependentCollection, user_id: str) -> List[DependentRecord]:
        table, index = self.collection_tables[collection]
        try:
            items = self.store.query_by_index(table, index, collection.association_attribute, user_id)
        except DynamoDBError as e:
            raise QueryFailedError(f'{collection.name.title()} lookup failed: {e}')
        except Exception as e:
            logger.error(f'Unexpected error querying {table}: {e}')
            raise QueryFailedError(f'{collection.name.title()} lookup failed: {e}')

        try:
            return [DependentRecord(collection=collection, key=collection.key_for(item)) for item in items]
        except KeyError as e:
            raise QueryFailedError(f'Malformed record in {table}: {e.args[0]}')

    def cascade_delete(self, records: List[DependentRecord]) -> Dict[DependentCollection, int]:
        """Delete every collected record by its composite key as one concurrent batch.

        Deletions run on a bounded thread pool. When one fails, deletions that
        have not started are cancelled and the batch fails; deletions already
        issued stay applied.

        Args:
            records: Dependent records from every collection

        Returns:
            Number of records deleted per collection

        Raises:
            CascadeDeleteFailedError: If any deletion fails
        """
        counts = {collection: 0 for collection in DependentCollection}
        if not records:
            return counts

        with ThreadPoolExecutor(max_workers=min(self.max_workers, len(records))) as executor:
            futures = [
                executor.submit(self.store.delete_by_key, self.collection_tables[record.collection][0], record.key)
                for record in records
            ]
            _, pending = wait(futures, return_when=FIRST_EXCEPTION)
            for future in pending:
                future.cancel()

        errors = [future.exception() for future in futures if not future.cancelled() and future.exception() is not None]
        if errors:
            completed = sum(1 for future in futures if not future.cancelled() and future.exception() is None)
            logger.error(f'Cascade deletion failed: {len(errors)} failed, {completed} of {len(records)} completed')
            raise CascadeDeleteFailedError(f'Failed to delete dependent records: {errors[0]}', completed=completed)

        counts.update(Counter(record.collection for record in records))
        return counts

    def delete_profile(self, user_id: str) -> None:
        """Delete the profile record by primary key.

        Raises:
            ProfileDeleteFailedError: If the deletion fails
        """
        try:
            self.store.delete_by_key(self.dynamodb_config.users_table, {'id': user_id})
        except DynamoDBError as e:
            raise ProfileDeleteFailedError(f'User record deletion failed: {e}')
        except Exception as e:
            logger.error(f'Unexpected error during profile deletion: {e}')
            raise ProfileDeleteFailedError(f'User record deletion failed: {e}')
