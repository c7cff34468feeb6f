"""
Discovery & Ranking Engine.
Filtered, sorted, paginated wizard listings and the top-N leaderboards.
"""
import operator
from functools import reduce
from typing import Any, Dict, Iterable, Iterator, List, Optional

from boto3.dynamodb.conditions import Attr, ConditionBase

from .config import config
from .errors import NotFound, ValidationError
from .models import ASC, DESC, USERS, Language, Role, Subject, enum_values, parse_enum_list
from .store import DocumentStore
from .workers import active_wizard_condition

SORT_DIRECTIONS = {'asc': ASC, 'desc': DESC}

TOP_SELLER_FIELDS = ['userId', 'name', 'image', 'experience.expJobs']
TOP_RATED_FIELDS = ['userId', 'name', 'image', 'reviews']


def _any_of(attribute: str, values: Iterable[str]) -> ConditionBase:
    """attribute contains at least one of values."""
    return reduce(operator.or_, [Attr(attribute).contains(value) for value in values])


def _excludes_everything(subjects, languages) -> bool:
    """An explicit empty filter list matches no wizard."""
    return any(isinstance(values, (list, tuple)) and not values for values in (subjects, languages))


def wizard_filter(subjects: Optional[List[str]] = None, languages: Optional[List[str]] = None) -> ConditionBase:
    """
    Discovery predicate: active wizards, with OR semantics inside the
    subjects and languages filters and AND across them. None means no
    filter; callers short-circuit empty lists with _excludes_everything.
    """
    condition = active_wizard_condition()
    subjects = parse_enum_list(Subject, subjects, 'subjects')
    languages = parse_enum_list(Language, languages, 'languages')
    if subjects:
        condition = condition & _any_of('subjects', enum_values(subjects))
    if languages:
        condition = condition & _any_of('languages', enum_values(languages))
    return condition


class DiscoveryEngine:
    """Read-only queries over the worker pool."""

    def __init__(self, store: DocumentStore, leaderboard_size: Optional[int] = None):
        self.store = store
        self.leaderboard_size = leaderboard_size or config.LEADERBOARD_SIZE

    def list_wizards(
        self,
        subjects: Optional[List[str]] = None,
        languages: Optional[List[str]] = None,
        sort_by_reviews: Optional[str] = None,
        page: int = 1,
        size: Optional[int] = 10
    ) -> Iterator[Dict[str, Any]]:
        """
        One page of active wizards matching the filters, without emails.

        Args:
            subjects: Wizard must offer at least one of these
            languages: Wizard must speak at least one of these
            sort_by_reviews: 'asc' or 'desc'; anything else keeps store order
            page: 1-based page number
            size: Page size; None returns every match

        Returns:
            One-shot iterator over the page
        """
        if page < 1:
            raise ValidationError('page', 'must be 1 or greater')
        if size is not None and size < 1:
            raise ValidationError('size', 'must be 1 or greater')

        condition = wizard_filter(subjects, languages)
        if _excludes_everything(subjects, languages):
            return iter(())

        direction = SORT_DIRECTIONS.get(sort_by_reviews) if isinstance(sort_by_reviews, str) else None
        sort = [('reviews', direction)] if direction is not None else None
        skip = (page - 1) * size if size is not None else 0

        return self.store.find_many(
            USERS,
            condition,
            exclude=('email',),
            sort=sort,
            skip=skip,
            limit=size
        )

    def count_wizards(self, subjects: Optional[List[str]] = None, languages: Optional[List[str]] = None) -> int:
        """Number of wizards list_wizards would page through."""
        condition = wizard_filter(subjects, languages)
        if _excludes_everything(subjects, languages):
            return 0
        return self.store.count(USERS, condition)

    def top_sellers(self) -> List[Dict[str, Any]]:
        """Wizards with the most jobs done."""
        return list(self.store.find_many(
            USERS,
            Attr('isWizard').eq(True),
            projection=TOP_SELLER_FIELDS,
            sort=[('experience.expJobs', DESC)],
            limit=self.leaderboard_size
        ))

    def top_rated_wizards(self) -> List[Dict[str, Any]]:
        """Best reviewed wizards among those that have done at least one job."""
        return list(self.store.find_many(
            USERS,
            Attr('isWizard').eq(True) & Attr('experience.expJobs').gt(0),
            projection=TOP_RATED_FIELDS,
            sort=[('reviews', DESC)],
            limit=self.leaderboard_size
        ))

    def get_calendar(self, worker_id: str) -> Dict[str, Any]:
        """
        Raises:
            NotFound: no enabled, non-admin user with this id
        """
        user = self.store.get(USERS, worker_id)
        if user is None or user.get('isDisabled', False) or user.get('role') == Role.ADMIN.value:
            raise NotFound('user', worker_id)
        return {'userId': user['userId'], 'calendar': user.get('calendar', {})}

