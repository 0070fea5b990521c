"""Unit tests for platform policy acceptance."""

import pytest

from bidchemz_logistics.core.errors import ValidationFailedError
from bidchemz_logistics.core.models.domain.enums import UserRole
from bidchemz_logistics.services.policies import (
    CURRENT_POLICY_VERSION,
    accept_policies,
    needs_policy_acceptance,
    policies_for_role,
)


def test_partners_also_get_the_partner_policy():
    assert set(policies_for_role(UserRole.LOGISTICS_PARTNER)) == {"partner", "terms", "privacy"}
    assert set(policies_for_role(UserRole.TRADER)) == {"terms", "privacy"}


async def test_accepting_current_version(session, make_user):
    user = await make_user()
    assert needs_policy_acceptance(user) is True

    await accept_policies(session, user, CURRENT_POLICY_VERSION)

    assert user.policy_version_accepted == CURRENT_POLICY_VERSION
    assert user.policy_accepted_at is not None
    assert needs_policy_acceptance(user) is False


async def test_stale_version_is_rejected(session, make_user):
    user = await make_user()
    with pytest.raises(ValidationFailedError, match="not current"):
        await accept_policies(session, user, "0.9")
    assert user.policy_version_accepted is None
