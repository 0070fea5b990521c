"""Domain-level types shared by entities, services and API models."""

from .enums import (
    DocumentType,
    HazardClass,
    LeadType,
    NotificationChannel,
    NotificationPriority,
    OfferStatus,
    PackagingType,
    PaymentMethod,
    PaymentRequestStatus,
    QuoteStatus,
    ShipmentStatus,
    SubscriptionTier,
    TransactionType,
    UserRole,
    VehicleType,
    WebhookEvent,
)

__all__ = [
    "DocumentType",
    "HazardClass",
    "LeadType",
    "NotificationChannel",
    "NotificationPriority",
    "OfferStatus",
    "PackagingType",
    "PaymentMethod",
    "PaymentRequestStatus",
    "QuoteStatus",
    "ShipmentStatus",
    "SubscriptionTier",
    "TransactionType",
    "UserRole",
    "VehicleType",
    "WebhookEvent",
]
