"""
Tests for caller identity helpers.
"""
import pytest

from marketplace.auth import (
    get_user_groups, get_user_sub, is_admin, require_admin, require_self_or_admin, require_user_sub,
)
from marketplace.errors import Forbidden, Unauthorized


def event_with(claims):
    return {'requestContext': {'authorizer': {'claims': claims}}}


class TestCallerIdentity:
    """Tests for reading the Cognito sub."""

    def test_sub_from_claims(self):
        assert get_user_sub(event_with({'sub': 'u1'})) == 'u1'
        assert require_user_sub(event_with({'sub': 'u1'})) == 'u1'

    def test_missing_sub(self):
        for event in [{}, {'requestContext': {}}, event_with({}), event_with({'sub': ''})]:
            assert get_user_sub(event) is None
            with pytest.raises(Unauthorized) as exc:
                require_user_sub(event)
            assert exc.value.status_code == 401

    def test_groups_as_string_or_list(self):
        assert get_user_groups(event_with({'cognito:groups': 'worker,admin'})) == ['worker', 'admin']
        assert get_user_groups(event_with({'cognito:groups': ['client']})) == ['client']
        assert get_user_groups({}) == []


class TestPermissions:
    """Tests for admin and ownership checks."""

    def test_admin(self):
        event = event_with({'sub': 'root', 'cognito:groups': 'admin'})

        assert is_admin(event)
        assert require_admin(event) == 'root'

    def test_non_admin_is_forbidden(self):
        with pytest.raises(Forbidden):
            require_admin(event_with({'sub': 'u1', 'cognito:groups': 'worker'}))

    def test_anonymous_admin_check_is_unauthorized(self):
        with pytest.raises(Unauthorized):
            require_admin({})

    def test_self_or_admin(self):
        assert require_self_or_admin(event_with({'sub': 'u1'}), 'u1') == 'u1'
        assert require_self_or_admin(event_with({'sub': 'root', 'cognito:groups': 'admin'}), 'u1') == 'root'
        with pytest.raises(Forbidden):
            require_self_or_admin(event_with({'sub': 'u2'}), 'u1')
        with pytest.raises(Unauthorized):
            require_self_or_admin({}, 'u1')
