"""Unit tests for personal data export and account anonymisation."""

import pytest

from bidchemz_logistics.core.errors import ConflictError
from bidchemz_logistics.core.models.domain.enums import QuoteStatus
from bidchemz_logistics.services.data_export import (
    ANONYMIZED_COMPANY,
    RETENTION_POLICY,
    delete_account,
    export_user_data,
)
from bidchemz_logistics.services.documents import store_document


class TestExport:
    async def test_trader_export(self, session, make_user, make_quote):
        trader = await make_user(company_name="Deepak Nitrite")
        quote = await make_quote(trader)
        await store_document(
            session, trader, quote_id=quote.id, file_name="msds.pdf", file_type="application/pdf", content=b"%PDF"
        )

        export = await export_user_data(session, trader)

        assert export["user"]["email"] == trader.email
        assert export["user"]["company_name"] == "Deepak Nitrite"
        assert export["user"]["role"] == "TRADER"
        assert [q["id"] for q in export["quotes"]] == [quote.id]
        assert export["wallet"] is None
        assert export["retention_policy"] == RETENTION_POLICY
        assert export["exported_at"].endswith("Z")

    async def test_export_never_leaks_secrets(self, session, make_user, make_quote):
        trader = await make_user()
        quote = await make_quote(trader)
        await store_document(
            session, trader, quote_id=quote.id, file_name="msds.pdf", file_type="application/pdf", content=b"%PDF"
        )

        export = await export_user_data(session, trader)

        assert "password_hash" not in export["user"]
        assert set(export["documents"][0]) == {"id", "file_name", "document_type", "created_at"}

    async def test_partner_export_includes_wallet_and_capability(self, session, make_partner):
        partner = await make_partner(balance=1234.5)

        export = await export_user_data(session, partner)

        assert export["wallet"] == {"balance": 1234.5, "currency": "INR"}
        assert export["partner_capability"]["dg_classes"] == ["CLASS_3"]
        assert export["lead_transactions"] == []


class TestDeleteAccount:
    async def test_anonymises_and_deactivates(self, session, make_user, make_quote):
        trader = await make_user()
        await make_quote(trader, status=QuoteStatus.SELECTED)

        deleted = await delete_account(session, trader)

        assert deleted.email == f"deleted-user-{trader.id}@anonymized.local"
        assert deleted.company_name == ANONYMIZED_COMPANY
        assert deleted.gstin is None
        assert deleted.is_active is False

    @pytest.mark.parametrize("status", [QuoteStatus.SUBMITTED, QuoteStatus.MATCHING, QuoteStatus.OFFERS_AVAILABLE])
    async def test_open_quotes_block_deletion(self, session, make_user, make_quote, status):
        trader = await make_user()
        await make_quote(trader, status=status)
        with pytest.raises(ConflictError, match="active quotes or shipments"):
            await delete_account(session, trader)
        assert trader.is_active is True
