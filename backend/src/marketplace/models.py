"""
Data models and closed vocabularies for the wizard marketplace.
Job lifecycle: In Progress → Completed | Cancelled
"""
from enum import Enum
from typing import Iterable, List, Optional, Type, TypeVar

from .errors import ValidationError

E = TypeVar('E', bound=Enum)


# Collections and their key attributes
USERS = 'users'
JOBS = 'jobs'

KEY_ATTRIBUTES = {
    USERS: 'userId',
    JOBS: 'jobId',
}

# Sort directions understood by the document store
ASC = 1
DESC = -1


class Role(str, Enum):
    """User roles."""
    CLIENT = 'client'
    WORKER = 'worker'
    ADMIN = 'admin'


class JobStatus(str, Enum):
    """Job lifecycle statuses."""
    IN_PROGRESS = 'In Progress'
    COMPLETED = 'Completed'
    CANCELLED = 'Cancelled'


# Allowed status transitions; terminal statuses have none
TRANSITIONS = {
    JobStatus.IN_PROGRESS: frozenset({JobStatus.COMPLETED, JobStatus.CANCELLED}),
    JobStatus.COMPLETED: frozenset(),
    JobStatus.CANCELLED: frozenset(),
}


class Subject(str, Enum):
    """Subjects a wizard can teach."""
    MATH = 'Math'
    PHYSICS = 'Physics'
    CHEMISTRY = 'Chemistry'
    BIOLOGY = 'Biology'
    HISTORY = 'History'
    GEOGRAPHY = 'Geography'
    LITERATURE = 'Literature'
    PROGRAMMING = 'Programming'
    ECONOMICS = 'Economics'
    MUSIC = 'Music'
    ART = 'Art'


class Language(str, Enum):
    """Languages a wizard can teach in."""
    ENGLISH = 'English'
    SPANISH = 'Spanish'
    PORTUGUESE = 'Portuguese'
    FRENCH = 'French'
    GERMAN = 'German'
    ITALIAN = 'Italian'
    CHINESE = 'Chinese'
    JAPANESE = 'Japanese'


# Review scale for clientReview
MIN_REVIEW = 1
MAX_REVIEW = 5


def parse_enum(enum_cls: Type[E], value, field: str) -> E:
    """
    Convert a raw value into a member of a closed vocabulary.

    Raises:
        ValidationError: if the value is not part of the vocabulary
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ', '.join(member.value for member in enum_cls)
        raise ValidationError(field, f"'{value}' is not one of: {allowed}")


def parse_enum_list(enum_cls: Type[E], values: Optional[Iterable], field: str) -> Optional[List[E]]:
    """Same as parse_enum for a list; None passes through."""
    if values is None:
        return None
    if isinstance(values, (str, bytes)):
        values = [values]
    return [parse_enum(enum_cls, value, field) for value in values]


def enum_values(members: Iterable[Enum]) -> List[str]:
    """Plain string values for storage."""
    return [member.value for member in members]
