"""
Shared database fixtures and record factories for the unit tests.

Every test gets a fresh in-memory SQLite database. The factories build the
smallest consistent marketplace: a trader, a partner with capability and a
funded wallet, and a quote the partner can carry.
"""

from __future__ import annotations

from datetime import timedelta
from typing import AsyncGenerator, Awaitable, Callable, Optional

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, create_async_engine
from sqlmodel.pool import StaticPool

from bidchemz_logistics.core.database import create_all, create_sessionmaker, utc_now
from bidchemz_logistics.core.database.entities.partner_capabilities import PartnerCapability
from bidchemz_logistics.core.database.entities.quotes import Quote
from bidchemz_logistics.core.database.entities.users import User
from bidchemz_logistics.core.database.entities.wallets import LeadWallet
from bidchemz_logistics.core.models.domain.enums import (
    HazardClass,
    PackagingType,
    QuoteStatus,
    SubscriptionTier,
    UserRole,
)
from bidchemz_logistics.services.security import (
    TokenPayload,
    create_access_token,
    generate_quote_number,
    hash_password,
)

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
DEFAULT_PASSWORD = "Str0ng!Pass"


@pytest_asyncio.fixture
async def test_engine() -> AsyncGenerator[AsyncEngine, None]:
    """A fresh in-memory database with every table created."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    await create_all(engine)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(name="session")
async def session_fixture(test_engine: AsyncEngine) -> AsyncGenerator[AsyncSession, None]:
    async with create_sessionmaker(test_engine)() as session:
        yield session


@pytest.fixture
def make_user(session: AsyncSession) -> Callable[..., Awaitable[User]]:
    counter = {"n": 0}

    async def _make(
        role: UserRole = UserRole.TRADER,
        *,
        email: Optional[str] = None,
        password: str = DEFAULT_PASSWORD,
        is_verified: bool = True,
        is_active: bool = True,
        company_name: Optional[str] = None,
    ) -> User:
        counter["n"] += 1
        user = User(
            email=email or f"{role.value.lower()}{counter['n']}@example.com",
            password_hash=hash_password(password),
            phone="+91 98765 43210",
            role=role,
            company_name=company_name or f"{role.value.title()} Co {counter['n']}",
            is_verified=is_verified,
            is_active=is_active,
        )
        session.add(user)
        await session.commit()
        await session.refresh(user)
        return user

    return _make


@pytest.fixture
def make_partner(session: AsyncSession, make_user) -> Callable[..., Awaitable[User]]:
    """A verified partner covering the default quote, with a funded wallet."""

    async def _make(
        *,
        balance: float = 5000.0,
        tier: SubscriptionTier = SubscriptionTier.FREE,
        dg_classes=("CLASS_3",),
        service_states=("Maharashtra", "Gujarat"),
        fleet_types=("TANKER", "TRUCK"),
        packaging=("DRUMS", "IBC"),
        temperature_controlled: bool = False,
        wallet: bool = True,
        **user_kwargs,
    ) -> User:
        partner = await make_user(UserRole.LOGISTICS_PARTNER, **user_kwargs)
        session.add(
            PartnerCapability(
                user_id=partner.id,
                dg_classes=list(dg_classes),
                service_states=list(service_states),
                fleet_types=list(fleet_types),
                packaging_capabilities=list(packaging),
                temperature_controlled=temperature_controlled,
                fleet_size=10,
                subscription_tier=tier,
            )
        )
        if wallet:
            session.add(LeadWallet(user_id=partner.id, balance=balance, alert_threshold=1000.0))
        await session.commit()
        return partner

    return _make


@pytest.fixture
def make_quote(session: AsyncSession) -> Callable[..., Awaitable[Quote]]:
    """CLASS_3 cargo, 20 MT in drums by tanker from Maharashtra to Gujarat."""

    async def _make(trader: User, **overrides) -> Quote:
        now = utc_now()
        fields = dict(
            quote_number=generate_quote_number(),
            trader_id=trader.id,
            status=QuoteStatus.SUBMITTED,
            cargo_name="Acetone",
            cas_number="67-64-1",
            quantity=20.0,
            quantity_unit="MT",
            is_hazardous=True,
            hazard_class=HazardClass.CLASS_3,
            un_number="UN1090",
            cargo_ready_date=now + timedelta(days=2),
            pickup_address="Plot 12, MIDC Taloja",
            pickup_city="Navi Mumbai",
            pickup_state="Maharashtra",
            pickup_pincode="410208",
            delivery_address="GIDC Estate, Ankleshwar",
            delivery_city="Ankleshwar",
            delivery_state="Gujarat",
            delivery_pincode="393002",
            packaging_type=PackagingType.DRUMS,
            preferred_vehicle_types=["TANKER"],
            expires_at=now + timedelta(hours=48),
            submitted_at=now,
        )
        fields.update(overrides)
        quote = Quote(**fields)
        session.add(quote)
        await session.commit()
        await session.refresh(quote)
        return quote

    return _make


@pytest.fixture
def auth_headers() -> Callable[[User], dict]:
    """Bearer headers for a user."""

    def _headers(user: User) -> dict:
        token = create_access_token(
            TokenPayload(user_id=user.id, email=user.email, role=user.role, company_name=user.company_name)
        )
        return {"Authorization": f"Bearer {token}"}

    return _headers
