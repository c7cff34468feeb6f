"""
Worker Directory.
Owns user/worker records: registration, wizard upgrade, enable/disable and
capability lookups.
"""
from decimal import Decimal
from typing import Any, Dict, Iterator, List, Optional

from boto3.dynamodb.conditions import Attr

from .errors import NotFound, ValidationError
from .logging import logger
from .models import USERS, Language, Role, Subject, enum_values, parse_enum, parse_enum_list
from .store import DocumentStore
from .utils import now_iso

WIZARD_FIELDS = ('languages', 'subjects', 'experience')

# Profile fields a wizard update may carry besides capabilities
PROFILE_FIELDS = ('name', 'image', 'calendar')


def active_user_condition():
    """Enabled, non-admin users."""
    return Attr('isDisabled').eq(False) & Attr('role').ne(Role.ADMIN.value)


def active_wizard_condition():
    """Users that may appear in discovery."""
    return active_user_condition() & Attr('isWizard').eq(True)


def _count(value: Any, field: str) -> int:
    if value is None:
        return 0
    if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)) or value < 0:
        raise ValidationError(field, 'must be a non-negative number')
    return value


def _normalize_experience(experience: Dict[str, Any], require_identity: bool = True) -> Dict[str, Any]:
    if not isinstance(experience, dict):
        raise ValidationError('experience', 'must be an object')
    normalized = {
        'title': (experience.get('title') or '').strip(),
        'origin': (experience.get('origin') or '').strip(),
        'expYears': _count(experience.get('expYears'), 'experience.expYears'),
        'expJobs': _count(experience.get('expJobs'), 'experience.expJobs'),
    }
    if require_identity and (not normalized['title'] or not normalized['origin']):
        raise ValidationError('experience', 'experience title and origin are required for wizards')
    return normalized


def _capabilities(languages, subjects) -> Dict[str, List[str]]:
    result = {}
    if languages is not None:
        parsed = parse_enum_list(Language, languages, 'languages')
        if not parsed:
            raise ValidationError('languages', 'a wizard must offer at least one language')
        result['languages'] = enum_values(dict.fromkeys(parsed))
    if subjects is not None:
        parsed = parse_enum_list(Subject, subjects, 'subjects')
        if not parsed:
            raise ValidationError('subjects', 'a wizard must offer at least one subject')
        result['subjects'] = enum_values(dict.fromkeys(parsed))
    return result


class WorkerDirectory:
    """Worker capability records over the ``users`` collection."""

    def __init__(self, store: DocumentStore):
        self.store = store

    def create_user(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Register a user.

        Wizard fields (languages, subjects, experience) are only accepted
        when isWizard is true, and are then all required.

        Raises:
            ValidationError: invalid or inconsistent registration data
            DuplicateKey: the email is already registered
        """
        email = (data.get('email') or '').strip().lower()
        if not email:
            raise ValidationError('email', 'email is required')

        is_wizard = data.get('isWizard') is True
        if not is_wizard and any(data.get(field) is not None for field in WIZARD_FIELDS):
            raise ValidationError('isWizard', 'You cannot pass wizard-related fields when isWizard is false')

        role = parse_enum(Role, data.get('role') or Role.CLIENT, 'role')
        timestamp = now_iso()
        user = {
            'name': data.get('name') or '',
            'email': email,
            'image': data.get('image') or '',
            'role': role.value,
            'isWizard': is_wizard,
            'isDisabled': False,
            'reviews': 0,
            'subjects': [],
            'languages': [],
            'calendar': data.get('calendar') or {},
            'createdAt': timestamp,
            'updatedAt': timestamp
        }
        if data.get('uidFireBase'):
            user['uidFireBase'] = data['uidFireBase']

        if is_wizard:
            if data.get('languages') is None or data.get('subjects') is None:
                raise ValidationError('isWizard', 'You must provide languages and subjects when isWizard is true')
            if not data.get('experience'):
                raise ValidationError('experience', 'You must provide experience title and origin when isWizard is true')
            user.update(_capabilities(data['languages'], data['subjects']))
            user['experience'] = _normalize_experience(data['experience'])

        created = self.store.insert(USERS, user, unique=('email',))
        logger.info(f"Created user {created['userId']} (wizard={is_wizard})")
        return created

    def find_capable_worker(self, worker_id: str) -> Dict[str, Any]:
        """
        Fetch a worker by id regardless of disabled or admin status.

        Raises:
            NotFound: no user with this id
        """
        worker = self.store.get(USERS, worker_id)
        if worker is None:
            raise NotFound('worker', worker_id)
        return worker

    def get_wizard(self, wizard_id: str) -> Dict[str, Any]:
        """Public profile of an enabled, non-admin wizard."""
        user = self.store.get(USERS, wizard_id)
        if (
            user is None
            or user.get('isDisabled', False)
            or user.get('role') == Role.ADMIN.value
            or not user.get('isWizard', False)
        ):
            raise NotFound('user', wizard_id)
        user.pop('email', None)
        return user

    def find_by_uid(self, uid: str) -> Dict[str, Any]:
        """Look up an enabled user by identity-provider uid."""
        user = self.store.find_one(USERS, Attr('uidFireBase').eq(uid) & Attr('isDisabled').eq(False))
        if user is None:
            raise NotFound('user', uid, message=f"User with uid {uid} not found")
        return user

    def upgrade_to_wizard(
        self,
        worker_id: str,
        languages: Optional[List[str]] = None,
        subjects: Optional[List[str]] = None,
        experience: Optional[Dict[str, Any]] = None,
        **fields
    ) -> Dict[str, Any]:
        """
        Turn an enabled user into a wizard, or update an existing wizard's
        profile.

        A non-wizard must supply languages, subjects and an experience with
        title and origin; otherwise nothing is written and the user stays a
        non-wizard. Existing wizards may send any subset.

        Raises:
            NotFound: no enabled user with this id
            ValidationError: incomplete or invalid wizard data
        """
        user = self.store.get(USERS, worker_id)
        if user is None or user.get('isDisabled', False):
            raise NotFound('user', worker_id)

        unknown = set(fields) - set(PROFILE_FIELDS)
        if unknown:
            raise ValidationError(sorted(unknown)[0], 'field cannot be updated')

        patch: Dict[str, Any] = {name: value for name, value in fields.items() if value is not None}

        if not user.get('isWizard', False):
            if languages is None or subjects is None or experience is None:
                raise ValidationError(
                    'isWizard',
                    'You must provide languages, subjects and experience when becoming a wizard'
                )
            patch.update(_capabilities(languages, subjects))
            patch['experience'] = _normalize_experience(experience)
            patch['isWizard'] = True
        else:
            patch.update(_capabilities(languages, subjects))
            if experience is not None:
                merged = dict(user.get('experience') or {})
                merged.update({k: v for k, v in experience.items() if v is not None})
                patch['experience'] = _normalize_experience(merged)

        patch['updatedAt'] = now_iso()
        updated = self.store.conditional_update(USERS, worker_id, Attr('isDisabled').eq(False), patch)
        if updated is None:
            raise NotFound('user', worker_id)

        if patch.get('isWizard'):
            logger.info(f"User {worker_id} upgraded to wizard")
        return updated

    def set_disabled(self, worker_id: str, flag: bool) -> Dict[str, Any]:
        """
        Disable or re-enable a user. Finds the user whatever its current
        flag, so repeating the call is harmless.

        Raises:
            NotFound: no user with this id
        """
        updated = self.store.conditional_update(
            USERS, worker_id, None, {'isDisabled': bool(flag), 'updatedAt': now_iso()}
        )
        if updated is None:
            raise NotFound('user', worker_id)
        logger.info(f"User {worker_id} isDisabled={bool(flag)}")
        return updated

    def list_users(self) -> Iterator[Dict[str, Any]]:
        """All non-admin users, for the admin console."""
        return self.store.find_many(USERS, Attr('role').ne(Role.ADMIN.value))

    def list_emails(self) -> List[Dict[str, Any]]:
        return [
            {'email': user.get('email'), 'isDisabled': user.get('isDisabled', False)}
            for user in self.store.find_many(
                USERS, Attr('role').ne(Role.ADMIN.value), projection=['email', 'isDisabled']
            )
        ]
