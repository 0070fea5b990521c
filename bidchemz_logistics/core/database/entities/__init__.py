"""
Database entity models.

Each module holds one table, or a small group of tables that only make sense
together:

- users: accounts plus email-verification and password-reset tokens
- partner_capabilities: what a logistics partner can carry and where
- quotes: freight requests
- offers: partner bids against quotes
- shipments: bookings created from selected offers
- wallets: lead wallets and their transaction ledger
- payment_requests: offline wallet top-ups awaiting review
- documents: encrypted uploads
- notifications: portal notifications
- audit_logs: audit trail
- pricing_configs: lead pricing multipliers
- webhook_logs: outbound webhook attempts
"""

from . import (
    audit_logs,
    documents,
    notifications,
    offers,
    partner_capabilities,
    payment_requests,
    pricing_configs,
    quotes,
    shipments,
    users,
    wallets,
    webhook_logs,
)
from .audit_logs import AuditLog
from .documents import Document
from .notifications import Notification
from .offers import Offer
from .partner_capabilities import PartnerCapability
from .payment_requests import PaymentRequest
from .pricing_configs import PricingConfig
from .quotes import Quote
from .shipments import Shipment
from .users import EmailVerificationToken, PasswordResetToken, User
from .wallets import LeadTransaction, LeadWallet
from .webhook_logs import WebhookLog

__all__ = [
    "AuditLog",
    "Document",
    "EmailVerificationToken",
    "LeadTransaction",
    "LeadWallet",
    "Notification",
    "Offer",
    "PartnerCapability",
    "PasswordResetToken",
    "PaymentRequest",
    "PricingConfig",
    "Quote",
    "Shipment",
    "User",
    "WebhookLog",
    "audit_logs",
    "documents",
    "notifications",
    "offers",
    "partner_capabilities",
    "payment_requests",
    "pricing_configs",
    "quotes",
    "shipments",
    "users",
    "wallets",
    "webhook_logs",
]
