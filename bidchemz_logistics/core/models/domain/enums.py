"""Domain enums for the freight marketplace."""

from __future__ import annotations

from enum import Enum


class UserRole(str, Enum):
    """Account roles. Admin accounts cannot be created through signup."""

    TRADER = "TRADER"
    LOGISTICS_PARTNER = "LOGISTICS_PARTNER"
    ADMIN = "ADMIN"


class QuoteStatus(str, Enum):
    """
    Lifecycle status of a freight request.

    ``SUBMITTED -> MATCHING -> OFFERS_AVAILABLE -> SELECTED`` is the happy
    path; ``EXPIRED`` and ``CANCELLED`` are terminal.
    """

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    MATCHING = "MATCHING"
    OFFERS_AVAILABLE = "OFFERS_AVAILABLE"
    SELECTED = "SELECTED"
    EXPIRED = "EXPIRED"
    CANCELLED = "CANCELLED"


class OfferStatus(str, Enum):
    """Lifecycle status of a partner offer."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"
    EXPIRED = "EXPIRED"


class ShipmentStatus(str, Enum):
    """Tracking status of a booked shipment."""

    BOOKED = "BOOKED"
    PICKUP_SCHEDULED = "PICKUP_SCHEDULED"
    IN_TRANSIT = "IN_TRANSIT"
    OUT_FOR_DELIVERY = "OUT_FOR_DELIVERY"
    DELIVERED = "DELIVERED"
    CANCELLED = "CANCELLED"


class HazardClass(str, Enum):
    """UN dangerous-goods classes."""

    CLASS_1 = "CLASS_1"  # Explosives
    CLASS_2 = "CLASS_2"  # Gases
    CLASS_3 = "CLASS_3"  # Flammable liquids
    CLASS_4 = "CLASS_4"  # Flammable solids
    CLASS_5 = "CLASS_5"  # Oxidizers and organic peroxides
    CLASS_6 = "CLASS_6"  # Toxic and infectious substances
    CLASS_7 = "CLASS_7"  # Radioactive material
    CLASS_8 = "CLASS_8"  # Corrosives
    CLASS_9 = "CLASS_9"  # Miscellaneous


class VehicleType(str, Enum):
    TRUCK = "TRUCK"
    CONTAINER = "CONTAINER"
    TANKER = "TANKER"
    ISO_TANK = "ISO_TANK"
    FLATBED = "FLATBED"
    REFRIGERATED = "REFRIGERATED"


class PackagingType(str, Enum):
    DRUMS = "DRUMS"
    IBC = "IBC"
    BAGS = "BAGS"
    BULK = "BULK"
    CYLINDERS = "CYLINDERS"
    ISO_TANK = "ISO_TANK"
    TANKER = "TANKER"


class SubscriptionTier(str, Enum):
    """Partner subscription tiers, also used as the matching sort key."""

    FREE = "FREE"
    STANDARD = "STANDARD"
    PREMIUM = "PREMIUM"


class TransactionType(str, Enum):
    CREDIT = "CREDIT"
    DEBIT = "DEBIT"
    RECHARGE = "RECHARGE"
    REFUND = "REFUND"


class LeadType(str, Enum):
    """Premium partners buy exclusive leads, everybody else shared ones."""

    EXCLUSIVE = "EXCLUSIVE"
    SHARED = "SHARED"


class PaymentMethod(str, Enum):
    BANK_TRANSFER = "BANK_TRANSFER"
    UPI = "UPI"
    CHEQUE = "CHEQUE"
    CASH = "CASH"


class PaymentRequestStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class DocumentType(str, Enum):
    MSDS = "MSDS"
    INVOICE = "INVOICE"
    PACKING_LIST = "PACKING_LIST"
    BILL_OF_LADING = "BILL_OF_LADING"
    OTHER = "OTHER"


class NotificationChannel(str, Enum):
    EMAIL = "EMAIL"
    SMS = "SMS"
    WHATSAPP = "WHATSAPP"
    PORTAL = "PORTAL"


class NotificationPriority(str, Enum):
    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class WebhookEvent(str, Enum):
    """Events delivered to the external marketplace webhook."""

    QUOTE_REQUESTED = "QUOTE_REQUESTED"
    QUOTE_OFFERS_AVAILABLE = "QUOTE_OFFERS_AVAILABLE"
    LEAD_PAYMENT_FAILED = "LEAD_PAYMENT_FAILED"
    OFFER_SELECTED = "OFFER_SELECTED"
    SHIPMENT_STATUS_UPDATED = "SHIPMENT_STATUS_UPDATED"
