"""
Tests for the Worker Directory: registration, wizard upgrade, disabling.
"""
import pytest

from marketplace.errors import DuplicateKey, NotFound, ValidationError
from marketplace.models import USERS

EXPERIENCE = {'title': 'Math teacher', 'origin': 'UBA', 'expYears': 5}


class TestCreateUser:
    """Tests for user registration."""

    def test_client_registration(self, directory):
        user = directory.create_user({'name': 'Ana', 'email': 'Ana@Example.com'})

        assert user['userId']
        assert user['email'] == 'ana@example.com'
        assert user['role'] == 'client'
        assert user['isWizard'] is False
        assert user['isDisabled'] is False

    def test_wizard_registration(self, directory):
        user = directory.create_user({
            'email': 'wiz@example.com',
            'isWizard': True,
            'subjects': ['Math', 'Math', 'Physics'],
            'languages': ['English'],
            'experience': EXPERIENCE
        })

        assert user['isWizard'] is True
        assert user['subjects'] == ['Math', 'Physics']
        assert user['experience']['expJobs'] == 0

    def test_wizard_fields_rejected_for_non_wizard(self, directory):
        with pytest.raises(ValidationError) as exc:
            directory.create_user({'email': 'a@example.com', 'subjects': ['Math']})
        assert exc.value.field == 'isWizard'

    def test_wizard_requires_experience_title(self, directory):
        with pytest.raises(ValidationError):
            directory.create_user({
                'email': 'a@example.com',
                'isWizard': True,
                'subjects': ['Math'],
                'languages': ['English'],
                'experience': {'origin': 'UBA'}
            })

    def test_unknown_subject_rejected(self, directory):
        with pytest.raises(ValidationError) as exc:
            directory.create_user({
                'email': 'a@example.com',
                'isWizard': True,
                'subjects': ['Alchemy'],
                'languages': ['English'],
                'experience': EXPERIENCE
            })
        assert exc.value.field == 'subjects'

    def test_duplicate_email(self, directory, store):
        directory.create_user({'email': 'dup@example.com'})

        with pytest.raises(DuplicateKey) as exc:
            directory.create_user({'email': 'DUP@example.com'})

        assert exc.value.field == 'email'
        assert store.count(USERS) == 1


class TestUpgradeToWizard:
    """Tests for the one-way wizard upgrade."""

    def test_upgrade_without_title_fails(self, directory, store, make_user):
        """Missing experience title leaves isWizard false."""
        user = make_user(isWizard=False, subjects=[], languages=[], experience=None)

        with pytest.raises(ValidationError):
            directory.upgrade_to_wizard(
                user['userId'],
                languages=['English'],
                subjects=['Math'],
                experience={'origin': 'UBA'}
            )

        assert store.get(USERS, user['userId'])['isWizard'] is False

    def test_upgrade_requires_all_capabilities(self, directory, make_user):
        user = make_user(isWizard=False)

        with pytest.raises(ValidationError) as exc:
            directory.upgrade_to_wizard(user['userId'], languages=['English'], experience=EXPERIENCE)
        assert exc.value.field == 'isWizard'

    def test_upgrade_success(self, directory, make_user):
        user = make_user(isWizard=False, subjects=[], languages=[])

        updated = directory.upgrade_to_wizard(
            user['userId'],
            languages=['Spanish'],
            subjects=['History'],
            experience=EXPERIENCE,
            name='Merlin'
        )

        assert updated['isWizard'] is True
        assert updated['subjects'] == ['History']
        assert updated['languages'] == ['Spanish']
        assert updated['experience']['title'] == 'Math teacher'
        assert updated['name'] == 'Merlin'

    def test_existing_wizard_skips_capability_requirement(self, directory, make_user):
        """A wizard may update profile fields only."""
        user = make_user()

        updated = directory.upgrade_to_wizard(user['userId'], image='merlin.png')

        assert updated['image'] == 'merlin.png'
        assert updated['subjects'] == ['Math']

    def test_existing_wizard_partial_experience_merges(self, directory, make_user):
        user = make_user()

        updated = directory.upgrade_to_wizard(user['userId'], experience={'expJobs': 4})

        assert updated['experience']['expJobs'] == 4
        assert updated['experience']['title'] == 'Teacher'

    def test_disabled_user_cannot_upgrade(self, directory, make_user):
        user = make_user(isWizard=False, isDisabled=True)

        with pytest.raises(NotFound):
            directory.upgrade_to_wizard(
                user['userId'], languages=['English'], subjects=['Math'], experience=EXPERIENCE
            )

    def test_unknown_profile_field_rejected(self, directory, make_user):
        user = make_user()

        with pytest.raises(ValidationError) as exc:
            directory.upgrade_to_wizard(user['userId'], role='admin')
        assert exc.value.field == 'role'


class TestSetDisabled:
    """Tests for disabling and re-enabling users."""

    def test_disable_is_idempotent(self, directory, make_user):
        user = make_user()

        assert directory.set_disabled(user['userId'], True)['isDisabled'] is True
        assert directory.set_disabled(user['userId'], True)['isDisabled'] is True

    def test_enable_again(self, directory, make_user):
        user = make_user(isDisabled=True)

        assert directory.set_disabled(user['userId'], False)['isDisabled'] is False

    def test_unknown_user(self, directory):
        with pytest.raises(NotFound):
            directory.set_disabled('missing', True)


class TestLookups:
    """Tests for worker and user lookups."""

    def test_find_capable_worker_ignores_disabled_flag(self, directory, make_user):
        user = make_user(isDisabled=True)

        assert directory.find_capable_worker(user['userId'])['userId'] == user['userId']

    def test_find_capable_worker_missing(self, directory):
        with pytest.raises(NotFound) as exc:
            directory.find_capable_worker('missing')
        assert exc.value.entity == 'worker'

    def test_get_wizard_hides_email(self, directory, make_user):
        user = make_user()

        wizard = directory.get_wizard(user['userId'])

        assert 'email' not in wizard

    def test_get_wizard_excludes_admins_and_non_wizards(self, directory, make_user):
        admin = make_user(role='admin')
        client = make_user(isWizard=False)

        for user in (admin, client):
            with pytest.raises(NotFound):
                directory.get_wizard(user['userId'])

    def test_find_by_uid(self, directory, make_user):
        make_user(uidFireBase='uid-1')

        assert directory.find_by_uid('uid-1')['uidFireBase'] == 'uid-1'
        with pytest.raises(NotFound):
            directory.find_by_uid('uid-2')

    def test_list_emails_skips_admins(self, directory, make_user):
        make_user(email='w@example.com')
        make_user(email='root@example.com', role='admin')

        emails = directory.list_emails()

        assert emails == [{'email': 'w@example.com', 'isDisabled': False}]
