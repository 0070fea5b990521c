"""Initial schema for BidChemz Logistics

Revision ID: 20260301_000000
Revises: None
Create Date: 2026-03-01 00:00:00.000000

Creates every marketplace table:
- Accounts (users, partner capabilities, verification and reset tokens)
- Marketplace (quotes, offers, shipments, documents)
- Lead wallets (wallets, transactions, payment requests, pricing configs)
- Bookkeeping (notifications, audit logs, webhook logs)

Enum-valued columns are stored as strings; timestamps are UTC with time zone.

Revision format: YYYYMMDD_HHMMSS_description

"""

from typing import Sequence, Union

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "20260301_000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps(with_updated: bool = True) -> list:
    columns = [sa.Column("created_at", sa.DateTime(timezone=True), nullable=False)]
    if with_updated:
        columns.append(sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False))
    return columns


def upgrade() -> None:
    """Create all tables."""

    # Create users table
    op.create_table(
        "users",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("phone", sa.String(32), nullable=False),
        sa.Column("role", sa.String(32), nullable=False),
        sa.Column("company_name", sa.String(255), nullable=True),
        sa.Column("gstin", sa.String(32), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("short_id", sa.String(32), nullable=True),
        sa.Column("is_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("policy_version_accepted", sa.String(16), nullable=True),
        sa.Column("policy_accepted_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_users_email", "email", unique=True),
        sa.Index("ix_users_short_id", "short_id", unique=True),
        sa.Index("ix_users_created_at", "created_at"),
    )

    # Create partner_capabilities table
    op.create_table(
        "partner_capabilities",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("dg_classes", sa.JSON(), nullable=False),
        sa.Column("service_states", sa.JSON(), nullable=False),
        sa.Column("fleet_types", sa.JSON(), nullable=False),
        sa.Column("packaging_capabilities", sa.JSON(), nullable=False),
        sa.Column("temperature_controlled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("fleet_size", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("subscription_tier", sa.String(16), nullable=False, server_default="FREE"),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_partner_capabilities_user_id", "user_id", unique=True),
    )

    # Create token tables
    for table in ("email_verification_tokens", "password_reset_tokens"):
        op.create_table(
            table,
            sa.Column("id", sa.String(64), nullable=False),
            sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
            sa.Column("token", sa.String(128), nullable=False),
            sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
            *_timestamps(with_updated=False),
            sa.PrimaryKeyConstraint("id"),
            sa.Index(f"ix_{table}_user_id", "user_id"),
            sa.Index(f"ix_{table}_token", "token", unique=True),
        )

    # Create quotes table
    op.create_table(
        "quotes",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("quote_number", sa.String(64), nullable=False),
        sa.Column("trader_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("bid_id", sa.String(128), nullable=True),
        sa.Column("cargo_name", sa.String(255), nullable=False),
        sa.Column("cas_number", sa.String(32), nullable=True),
        sa.Column("quantity", sa.Float(), nullable=False),
        sa.Column("quantity_unit", sa.String(16), nullable=False),
        sa.Column("is_hazardous", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("hazard_class", sa.String(16), nullable=True),
        sa.Column("un_number", sa.String(16), nullable=True),
        sa.Column("cargo_ready_date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("estimated_delivery_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("pickup_address", sa.Text(), nullable=False),
        sa.Column("pickup_city", sa.String(128), nullable=False),
        sa.Column("pickup_state", sa.String(128), nullable=False),
        sa.Column("pickup_pincode", sa.String(16), nullable=False),
        sa.Column("pickup_contact_name", sa.String(128), nullable=True),
        sa.Column("pickup_contact_phone", sa.String(32), nullable=True),
        sa.Column("delivery_address", sa.Text(), nullable=False),
        sa.Column("delivery_city", sa.String(128), nullable=False),
        sa.Column("delivery_state", sa.String(128), nullable=False),
        sa.Column("delivery_pincode", sa.String(16), nullable=False),
        sa.Column("delivery_contact_name", sa.String(128), nullable=True),
        sa.Column("delivery_contact_phone", sa.String(32), nullable=True),
        sa.Column("packaging_type", sa.String(32), nullable=False),
        sa.Column("packaging_details", sa.Text(), nullable=True),
        sa.Column("temperature_controlled", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("temperature_min", sa.Float(), nullable=True),
        sa.Column("temperature_max", sa.Float(), nullable=True),
        sa.Column("preferred_vehicle_types", sa.JSON(), nullable=False),
        sa.Column("is_urgent", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("insurance_required", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("msds_available", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("payment_terms", sa.String(64), nullable=True),
        sa.Column("additional_notes", sa.Text(), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expiry_warning_sent_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_quotes_quote_number", "quote_number", unique=True),
        sa.Index("ix_quotes_trader_id", "trader_id"),
        sa.Index("ix_quotes_status", "status"),
        sa.Index("ix_quotes_bid_id", "bid_id"),
        sa.Index("ix_quotes_expires_at", "expires_at"),
        sa.Index("ix_quotes_created_at", "created_at"),
    )

    # Create offers table
    op.create_table(
        "offers",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("quote_id", sa.String(64), sa.ForeignKey("quotes.id"), nullable=False),
        sa.Column("partner_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("transit_days", sa.Integer(), nullable=False),
        sa.Column("offer_valid_until", sa.DateTime(timezone=True), nullable=False),
        sa.Column("pickup_available_from", sa.DateTime(timezone=True), nullable=False),
        sa.Column("insurance_included", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("tracking_included", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("customs_clearance", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("value_added_services", sa.Text(), nullable=True),
        sa.Column("terms", sa.Text(), nullable=True),
        sa.Column("remarks", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("is_selected", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("selected_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_offers_quote_id", "quote_id"),
        sa.Index("ix_offers_partner_id", "partner_id"),
        sa.Index("ix_offers_status", "status"),
        sa.Index("ix_offers_created_at", "created_at"),
    )

    # Create shipments table
    op.create_table(
        "shipments",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("shipment_number", sa.String(64), nullable=False),
        sa.Column("quote_id", sa.String(64), sa.ForeignKey("quotes.id"), nullable=False),
        sa.Column("offer_id", sa.String(64), sa.ForeignKey("offers.id"), nullable=False),
        sa.Column("trader_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("partner_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("current_location", sa.String(255), nullable=True),
        sa.Column("estimated_delivery", sa.DateTime(timezone=True), nullable=True),
        sa.Column("actual_pickup_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("actual_delivery_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("tracking_events", sa.JSON(), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("review", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("offer_id"),
        sa.Index("ix_shipments_shipment_number", "shipment_number", unique=True),
        sa.Index("ix_shipments_quote_id", "quote_id"),
        sa.Index("ix_shipments_trader_id", "trader_id"),
        sa.Index("ix_shipments_partner_id", "partner_id"),
        sa.Index("ix_shipments_status", "status"),
        sa.Index("ix_shipments_created_at", "created_at"),
    )

    # Create documents table
    op.create_table(
        "documents",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("quote_id", sa.String(64), sa.ForeignKey("quotes.id"), nullable=True),
        sa.Column("shipment_id", sa.String(64), sa.ForeignKey("shipments.id"), nullable=True),
        sa.Column("uploaded_by", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("file_name", sa.String(255), nullable=False),
        sa.Column("file_type", sa.String(128), nullable=False),
        sa.Column("file_size", sa.Integer(), nullable=False),
        sa.Column("storage_path", sa.String(512), nullable=False),
        sa.Column("encryption_key", sa.String(128), nullable=False),
        sa.Column("document_type", sa.String(32), nullable=False),
        *_timestamps(with_updated=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_documents_quote_id", "quote_id"),
        sa.Index("ix_documents_shipment_id", "shipment_id"),
        sa.Index("ix_documents_uploaded_by", "uploaded_by"),
    )

    # Create lead_wallets table
    op.create_table(
        "lead_wallets",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("balance", sa.Float(), nullable=False, server_default="0"),
        sa.Column("currency", sa.String(8), nullable=False, server_default="INR"),
        sa.Column("low_balance_alert", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("alert_threshold", sa.Float(), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_lead_wallets_user_id", "user_id", unique=True),
    )

    # Create lead_transactions table
    op.create_table(
        "lead_transactions",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("wallet_id", sa.String(64), sa.ForeignKey("lead_wallets.id"), nullable=False),
        sa.Column("offer_id", sa.String(64), nullable=True),
        sa.Column("transaction_type", sa.String(16), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("balance_after", sa.Float(), nullable=True),
        sa.Column("description", sa.Text(), nullable=False, server_default=""),
        sa.Column("lead_id", sa.String(64), nullable=True),
        sa.Column("lead_type", sa.String(16), nullable=True),
        sa.Column("hazard_category", sa.String(32), nullable=True),
        sa.Column("quantity", sa.Float(), nullable=True),
        sa.Column("vehicle_type", sa.String(32), nullable=True),
        *_timestamps(with_updated=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_lead_transactions_wallet_id", "wallet_id"),
        sa.Index("ix_lead_transactions_offer_id", "offer_id"),
        sa.Index("ix_lead_transactions_created_at", "created_at"),
    )

    # Create payment_requests table
    op.create_table(
        "payment_requests",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("amount", sa.Float(), nullable=False),
        sa.Column("payment_method", sa.String(32), nullable=False),
        sa.Column("reference_number", sa.String(128), nullable=True),
        sa.Column("transaction_id", sa.String(128), nullable=True),
        sa.Column("payment_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("request_notes", sa.Text(), nullable=True),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("reviewed_by", sa.String(64), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("review_notes", sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_payment_requests_user_id", "user_id"),
        sa.Index("ix_payment_requests_status", "status"),
        sa.Index("ix_payment_requests_created_at", "created_at"),
    )

    # Create pricing_configs table
    op.create_table(
        "pricing_configs",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("base_lead_cost", sa.Float(), nullable=False),
        sa.Column("hazard_multipliers", sa.JSON(), nullable=False),
        sa.Column("distance_multipliers", sa.JSON(), nullable=False),
        sa.Column("quantity_ranges", sa.JSON(), nullable=False),
        sa.Column("vehicle_multipliers", sa.JSON(), nullable=False),
        sa.Column("urgency_multiplier", sa.Float(), nullable=False),
        sa.Column("tier_multipliers", sa.JSON(), nullable=False),
        sa.Column("created_by", sa.String(64), nullable=True),
        *_timestamps(with_updated=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_pricing_configs_is_active", "is_active"),
        sa.Index("ix_pricing_configs_created_at", "created_at"),
    )

    # Create notifications table
    op.create_table(
        "notifications",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("type", sa.String(64), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("message", sa.Text(), nullable=False),
        sa.Column("priority", sa.String(16), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("data", sa.JSON(), nullable=True),
        *_timestamps(with_updated=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_notifications_user_id", "user_id"),
        sa.Index("ix_notifications_read", "read"),
        sa.Index("ix_notifications_created_at", "created_at"),
    )

    # Create audit_logs table
    op.create_table(
        "audit_logs",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("user_id", sa.String(64), nullable=True),
        sa.Column("quote_id", sa.String(64), nullable=True),
        sa.Column("shipment_id", sa.String(64), nullable=True),
        sa.Column("action", sa.String(64), nullable=False),
        sa.Column("entity", sa.String(64), nullable=False),
        sa.Column("entity_id", sa.String(64), nullable=True),
        sa.Column("changes", sa.JSON(), nullable=False),
        *_timestamps(with_updated=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_audit_logs_user_id", "user_id"),
        sa.Index("ix_audit_logs_quote_id", "quote_id"),
        sa.Index("ix_audit_logs_shipment_id", "shipment_id"),
        sa.Index("ix_audit_logs_action", "action"),
        sa.Index("ix_audit_logs_created_at", "created_at"),
    )

    # Create webhook_logs table
    op.create_table(
        "webhook_logs",
        sa.Column("id", sa.String(64), nullable=False),
        sa.Column("event", sa.String(64), nullable=False),
        sa.Column("url", sa.String(512), nullable=False),
        sa.Column("payload", sa.JSON(), nullable=False),
        sa.Column("hmac_signature", sa.String(128), nullable=False),
        sa.Column("status", sa.Integer(), nullable=True),
        sa.Column("response_body", sa.Text(), nullable=True),
        sa.Column("attempts", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("last_attempt", sa.DateTime(timezone=True), nullable=False),
        *_timestamps(with_updated=False),
        sa.PrimaryKeyConstraint("id"),
        sa.Index("ix_webhook_logs_event", "event"),
        sa.Index("ix_webhook_logs_created_at", "created_at"),
    )


def downgrade() -> None:
    """Drop all tables in reverse dependency order."""
    for table in (
        "webhook_logs",
        "audit_logs",
        "notifications",
        "pricing_configs",
        "payment_requests",
        "lead_transactions",
        "lead_wallets",
        "documents",
        "shipments",
        "offers",
        "quotes",
        "password_reset_tokens",
        "email_verification_tokens",
        "partner_capabilities",
        "users",
    ):
        op.drop_table(table)
