"""Unit tests for the repository layer."""

from datetime import timedelta

from bidchemz_logistics.core.database import utc_now
from bidchemz_logistics.core.database.entities.offers import Offer
from bidchemz_logistics.core.database.entities.wallets import LeadTransaction
from bidchemz_logistics.core.database.repositories.offers import OfferRepository
from bidchemz_logistics.core.database.repositories.quotes import QuoteRepository
from bidchemz_logistics.core.database.repositories.users import UserRepository
from bidchemz_logistics.core.database.repositories.wallets import LeadWalletRepository
from bidchemz_logistics.core.models.domain.enums import OfferStatus, QuoteStatus, TransactionType, UserRole


def _offer(quote, partner, **fields) -> Offer:
    now = utc_now()
    values = dict(
        quote_id=quote.id,
        partner_id=partner.id,
        price=40000.0,
        transit_days=3,
        offer_valid_until=now + timedelta(days=1),
        pickup_available_from=now,
    )
    values.update(fields)
    return Offer(**values)


class TestBaseRepository:
    async def test_create_get_update_delete(self, session, make_user, make_partner, make_quote):
        repo = OfferRepository(session)
        quote = await make_quote(await make_user())
        offer = await repo.create(_offer(quote, await make_partner()))

        assert (await repo.get_by_id(offer.id)) is offer
        offer.price = 38000.0
        assert (await repo.update(offer)).price == 38000.0
        assert await repo.delete(offer.id) is True
        assert await repo.delete(offer.id) is False
        assert await repo.get_by_id(offer.id) is None

    async def test_none_and_unknown_filters_are_ignored(self, session, make_user):
        await make_user(UserRole.TRADER)
        await make_user(UserRole.ADMIN)
        repo = UserRepository(session)

        assert await repo.count({"role": None, "not_a_column": "x"}) == 2
        assert await repo.count({"role": UserRole.ADMIN}) == 1

    async def test_list_paginates(self, session, make_user):
        users = {(await make_user()).id for _ in range(3)}
        repo = UserRepository(session)

        first = await repo.list(limit=2)
        rest = await repo.list(limit=2, offset=2)

        assert len(first) == 2
        assert {u.id for u in first + rest} == users


class TestUserRepository:
    async def test_email_lookup_ignores_case(self, session, make_user):
        user = await make_user(email="dispatch@gati-chem.example.com")
        assert (await UserRepository(session).get_by_email("  Dispatch@Gati-Chem.example.com ")).id == user.id

    async def test_matchable_partners_are_active_verified_partners(self, session, make_user, make_partner):
        partner = await make_partner()
        await make_partner(is_verified=False)
        await make_user(UserRole.TRADER)

        rows = await UserRepository(session).list_matchable_partners()

        assert [(user.id, capability.user_id) for user, capability in rows] == [(partner.id, partner.id)]


class TestQuoteRepository:
    async def test_search_returns_page_and_total(self, session, make_user, make_quote):
        trader = await make_user()
        for _ in range(3):
            await make_quote(trader)
        await make_quote(await make_user())

        page, total = await QuoteRepository(session).search(trader_id=trader.id, limit=2)

        assert total == 3
        assert len(page) == 2

    async def test_expiry_windows(self, session, make_user, make_quote):
        trader = await make_user()
        now = utc_now()
        overdue = await make_quote(trader, status=QuoteStatus.MATCHING, expires_at=now - timedelta(minutes=1))
        closing = await make_quote(trader, status=QuoteStatus.OFFERS_AVAILABLE, expires_at=now + timedelta(minutes=5))
        await make_quote(trader, status=QuoteStatus.SELECTED, expires_at=now - timedelta(minutes=1))

        repo = QuoteRepository(session)
        assert [q.id for q in await repo.list_expired_open(now)] == [overdue.id]
        assert [q.id for q in await repo.list_expiring_between(now, now + timedelta(minutes=10))] == [closing.id]

    async def test_count_by_status(self, session, make_user, make_quote):
        trader = await make_user()
        await make_quote(trader)
        await make_quote(trader, status=QuoteStatus.SELECTED)
        await make_quote(trader, status=QuoteStatus.SELECTED)

        assert await QuoteRepository(session).count_by_status() == {"SUBMITTED": 1, "SELECTED": 2}


class TestOfferRepository:
    async def test_withdrawn_offers_are_not_active(self, session, make_user, make_partner, make_quote):
        quote = await make_quote(await make_user())
        partner = await make_partner()
        repo = OfferRepository(session)
        await repo.create(_offer(quote, partner, status=OfferStatus.WITHDRAWN))

        assert await repo.find_active_for_partner(quote.id, partner.id) is None

    async def test_bulk_status_change_skips_excluded_and_settled(self, session, make_user, make_partner, make_quote):
        quote = await make_quote(await make_user())
        repo = OfferRepository(session)
        keep = await repo.create(_offer(quote, await make_partner()))
        other = await repo.create(_offer(quote, await make_partner()))
        withdrawn = await repo.create(_offer(quote, await make_partner(), status=OfferStatus.WITHDRAWN))

        changed = await repo.set_status_for_pending(quote.id, OfferStatus.REJECTED, exclude_offer_id=keep.id)

        assert changed == 1
        for offer in (keep, other, withdrawn):
            await session.refresh(offer)
        assert (keep.status, other.status, withdrawn.status) == (
            OfferStatus.PENDING,
            OfferStatus.REJECTED,
            OfferStatus.WITHDRAWN,
        )

    async def test_accepted_gmv(self, session, make_user, make_partner, make_quote):
        quote = await make_quote(await make_user())
        repo = OfferRepository(session)
        await repo.create(_offer(quote, await make_partner(), price=45000.0, status=OfferStatus.ACCEPTED))
        await repo.create(_offer(quote, await make_partner(), price=99000.0))

        assert await repo.accepted_gmv() == 45000.0


class TestLeadWalletRepository:
    async def test_try_debit_guards_the_balance(self, session, make_partner):
        partner = await make_partner(balance=1000.0)
        repo = LeadWalletRepository(session)
        wallet = await repo.get_by_user(partner.id)

        assert await repo.try_debit(wallet, 600.0) is True
        assert wallet.balance == 400.0
        assert await repo.try_debit(wallet, 600.0) is False
        assert wallet.balance == 400.0

    async def test_alerting_wallets_and_debit_total(self, session, make_partner):
        low = await make_partner(balance=900.0)
        await make_partner(balance=5000.0)
        repo = LeadWalletRepository(session)
        wallet = await repo.get_by_user(low.id)
        await repo.add_transaction(
            LeadTransaction(wallet_id=wallet.id, transaction_type=TransactionType.DEBIT, amount=250.0)
        )
        await repo.add_transaction(
            LeadTransaction(wallet_id=wallet.id, transaction_type=TransactionType.RECHARGE, amount=900.0)
        )

        assert [w.user_id for w in await repo.list_alerting()] == [low.id]
        assert await repo.total_debited() == 250.0
        assert await repo.has_transaction_for_offer("none", TransactionType.DEBIT) is False
