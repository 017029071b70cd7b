"""
Core data models for the user purge workflow.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


@dataclass
class UserProfile:
    """Represents the user's profile record in the Users table."""
    id: str
    email: str  # Contact address; required before any deletion happens


class DependentCollection(Enum):
    """Collections whose records reference a user and are purged with it.

    Each member carries (association attribute, key schema). The key schema
    lists, per table key name, the record attributes to read it from in order
    of preference.
    """
    CONVERSATIONS = ('associated_account', (
        ('conversation_id', ('conversation_id', )),
        ('response_id', ('responseId', 'response_id')),
    ))
    THREADS = ('associated_accounts', (
        ('thread_id', ('thread_id', )),
        ('message_id', ('message_id', )),
    ))

    def __init__(self, association_attribute: str, key_schema: Tuple[Tuple[str, Tuple[str, ...]], ...]):
        self.association_attribute = association_attribute
        self.key_schema = key_schema

    def key_for(self, item: Dict[str, Any]) -> Dict[str, Any]:
        """Build the composite table key for a record of this collection.

        Raises:
            KeyError: If the record lacks a key attribute
        """
        key = {}
        for key_name, sources in self.key_schema:
            value = next((item[source] for source in sources if item.get(source) is not None), None)
            if value is None:
                raise KeyError(f'{self.name.lower()} record is missing key attribute {key_name}')
            key[key_name] = value
        return key


@dataclass
class DependentRecord:
    """A dependent record reduced to its collection and composite key."""
    collection: DependentCollection
    key: Dict[str, Any]


class Stage(Enum):
    """Sequential stages of a user deletion."""
    RESOLVE = 'resolve'
    DELETE_IDENTITY = 'delete_identity'
    COLLECT = 'collect'
    CASCADE_DELETE = 'cascade_delete'
    DELETE_PROFILE = 'delete_profile'


@dataclass
class StageResult:
    """Outcome of one stage, kept so partial completion can be diagnosed."""
    stage: Stage
    succeeded: bool
    detail: str = ''
    error: Optional[str] = None  # Taxonomy tag when the stage failed


@dataclass
class DeletionOutcome:
    """Aggregate result of a completed user deletion."""
    user_id: str
    conversations: int
    threads: int
    stages: List[StageResult] = field(default_factory=list)

    def deleted_counts(self) -> Dict[str, int]:
        return {'conversations': self.conversations, 'threads': self.threads}
