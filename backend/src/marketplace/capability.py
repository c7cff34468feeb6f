"""
Capability checks between a worker and the subject/language a job requires.
"""
from typing import Any, Dict

from boto3.dynamodb.conditions import Attr, ConditionBase

from .errors import CapabilityError
from .models import Language, Subject


def validate_assignment(worker: Dict[str, Any], subject: Subject, language: Language) -> None:
    """
    Check that a worker can take a job in ``subject`` taught in ``language``.
    Subject is checked before language; the first failure is reported.

    Raises:
        CapabilityError: MISSING_SUBJECT or MISSING_LANGUAGE
    """
    if Subject(subject).value not in set(worker.get('subjects') or ()):
        raise CapabilityError(CapabilityError.MISSING_SUBJECT)
    if Language(language).value not in set(worker.get('languages') or ()):
        raise CapabilityError(CapabilityError.MISSING_LANGUAGE)


def capability_condition(subject: Subject, language: Language) -> ConditionBase:
    """The same check as a store condition, re-asserted at write time."""
    return (
        Attr('subjects').contains(Subject(subject).value)
        & Attr('languages').contains(Language(language).value)
    )
