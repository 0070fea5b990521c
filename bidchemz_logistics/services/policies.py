"""Platform policies users accept at signup and when a new version ships."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Dict

from sqlalchemy.ext.asyncio import AsyncSession

from bidchemz_logistics.core.database.base import utc_now
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.errors import ValidationFailedError
from bidchemz_logistics.core.models.domain.enums import UserRole

from .audit import record_audit

CURRENT_POLICY_VERSION = "1.0"
EFFECTIVE_DATE = date(2025, 11, 20)


@dataclass(frozen=True)
class Policy:
    key: str
    title: str
    version: str
    effective_date: date
    content: str


PARTNER_POLICY = Policy(
    key="partner",
    title="Logistics Partner Policy",
    version=CURRENT_POLICY_VERSION,
    effective_date=EFFECTIVE_DATE,
    content="""\
1. Purpose
BidChemz provides safe, reliable and compliant logistics for industrial
chemicals across India. This policy sets the minimum standards for every
logistics partner on the platform.

2. Mandatory requirements
- Valid dangerous goods licences wherever applicable, GST registration and
  transport permits.
- DG/HAZMAT trained staff, PPE, spill kits and emergency response readiness.
- Goods-in-transit and public liability insurance; pollution liability
  insurance is preferred for hazardous cargo.

3. Operations
- GPS-enabled fleet for live tracking and chemical-compliant vehicles.
- Digital documentation (POD, invoice, LR) and tracking updates through the
  BidChemz API.
- Incidents are reported within 60 minutes.

4. Disqualification
Repeated safety violations, misrepresented documents, non-compliance with DG
rules or misuse of user data lead to suspension or removal.

5. Acceptance
By onboarding, the partner agrees to comply with this policy.
""",
)

TERMS_OF_SERVICE = Policy(
    key="terms",
    title="Terms of Service",
    version=CURRENT_POLICY_VERSION,
    effective_date=EFFECTIVE_DATE,
    content="""\
1. Accounts: keep your information accurate and your credentials secure.
2. Use: the platform may only be used for lawful purposes.
3. Pricing: lead fees are deducted automatically from partner wallets and are
   final unless stated otherwise.
4. Liability: BidChemz is not liable for indirect or consequential damages.
5. Termination: accounts that violate these terms may be suspended.
6. Governing law: these terms are governed by the laws of India.
""",
)

PRIVACY_POLICY = Policy(
    key="privacy",
    title="Privacy Policy",
    version=CURRENT_POLICY_VERSION,
    effective_date=EFFECTIVE_DATE,
    content="""\
1. We collect account, business and usage information needed to run the
   marketplace.
2. Freight details are shared only with the logistics partners that can carry
   them; we never sell personal data.
3. Uploaded documents are encrypted at rest with AES-256.
4. You may access, correct, export or delete your data at any time.
5. Contact: privacy@bidchemz.com
""",
)

POLICIES: Dict[str, Policy] = {p.key: p for p in (PARTNER_POLICY, TERMS_OF_SERVICE, PRIVACY_POLICY)}


def policies_for_role(role: UserRole) -> Dict[str, Policy]:
    """Partners additionally accept the partner policy."""
    if role == UserRole.LOGISTICS_PARTNER:
        return dict(POLICIES)
    return {key: policy for key, policy in POLICIES.items() if key != PARTNER_POLICY.key}


def needs_policy_acceptance(user: User) -> bool:
    return user.policy_version_accepted != CURRENT_POLICY_VERSION


async def accept_policies(session: AsyncSession, user: User, version: str) -> User:
    if version != CURRENT_POLICY_VERSION:
        raise ValidationFailedError(f"Policy version {version} is not current (current: {CURRENT_POLICY_VERSION})")
    user.policy_version_accepted = version
    user.policy_accepted_at = utc_now()
    session.add(user)
    await session.flush()
    await record_audit(
        session,
        action="ACCEPT_POLICY",
        entity="USER",
        entity_id=user.id,
        user_id=user.id,
        changes={"version": version},
    )
    return user
