"""
I/O models for API requests and responses.

This package contains Pydantic-based I/O schemas that define the contract
between API endpoints and clients. These models are separate from database
entities so the stored schema and the API contract can evolve independently.

Modules:
- auth: signup, login and password reset
- quotes: freight requests, timers and matches
- offers: partner bids and lead-cost previews
- shipments: bookings, tracking and reviews
- wallet: lead wallets, ledger entries and payment requests
- partner: partner capabilities and activity
- notifications: portal notifications
- admin: platform stats, user moderation and pricing tables
- documents: encrypted document metadata
- policies: platform policies
"""

from .admin import AdminUserUpdate, PlatformStats, PricingConfigRead, PricingConfigUpdate, QuantityRangeModel
from .auth import (
    AuthResponse,
    ForgotPasswordRequest,
    LoginRequest,
    MessageResponse,
    ResetPasswordRequest,
    SignupRequest,
    UserRead,
)
from .documents import DocumentRead
from .notifications import (
    MarkNotificationsRead,
    MarkNotificationsResult,
    NotificationListResponse,
    NotificationRead,
)
from .offers import (
    LeadCostBreakdown,
    LeadCostPreview,
    LeadCostRequest,
    OfferCreate,
    OfferListResponse,
    OfferRead,
    OfferSelectResponse,
    OfferSubmitResponse,
    OfferUpdate,
)
from .partner import PartnerActivity, PartnerCapabilityRead, PartnerCapabilityUpdate
from .policies import PolicyAccept, PolicyListResponse, PolicyRead
from .quotes import (
    MatchedPartnerRead,
    PaginationMeta,
    QuoteCreate,
    QuoteCreateResponse,
    QuoteListResponse,
    QuotePage,
    QuoteRead,
    QuoteTimerExtend,
    QuoteTimerRead,
    QuoteUpdate,
)
from .shipments import ShipmentListResponse, ShipmentRead, ShipmentReview, ShipmentTracking, ShipmentUpdate
from .wallet import (
    LeadTransactionRead,
    PaymentRequestCreate,
    PaymentRequestRead,
    PaymentRequestReview,
    WalletRead,
    WalletResponse,
    WalletSettingsUpdate,
)

__all__ = [
    "AdminUserUpdate",
    "AuthResponse",
    "DocumentRead",
    "ForgotPasswordRequest",
    "LeadCostBreakdown",
    "LeadCostPreview",
    "LeadCostRequest",
    "LeadTransactionRead",
    "LoginRequest",
    "MarkNotificationsRead",
    "MarkNotificationsResult",
    "MatchedPartnerRead",
    "MessageResponse",
    "NotificationListResponse",
    "NotificationRead",
    "OfferCreate",
    "OfferListResponse",
    "OfferRead",
    "OfferSelectResponse",
    "OfferSubmitResponse",
    "OfferUpdate",
    "PaginationMeta",
    "PartnerActivity",
    "PartnerCapabilityRead",
    "PartnerCapabilityUpdate",
    "PaymentRequestCreate",
    "PaymentRequestRead",
    "PaymentRequestReview",
    "PlatformStats",
    "PolicyAccept",
    "PolicyListResponse",
    "PolicyRead",
    "PricingConfigRead",
    "PricingConfigUpdate",
    "QuantityRangeModel",
    "QuoteCreate",
    "QuoteCreateResponse",
    "QuoteListResponse",
    "QuotePage",
    "QuoteRead",
    "QuoteTimerExtend",
    "QuoteTimerRead",
    "QuoteUpdate",
    "ResetPasswordRequest",
    "ShipmentListResponse",
    "ShipmentRead",
    "ShipmentReview",
    "ShipmentTracking",
    "ShipmentUpdate",
    "SignupRequest",
    "UserRead",
    "WalletRead",
    "WalletResponse",
    "WalletSettingsUpdate",
]
