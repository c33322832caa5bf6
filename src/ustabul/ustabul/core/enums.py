from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """İstifadəçi rolu (icazələr üçün)."""

    CUSTOMER = "CUSTOMER"
    MASTER = "MASTER"
    ADMIN = "ADMIN"


class OrderStatus(str, Enum):
    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Urgency(str, Enum):
    PLANNED = "PLANNED"
    TODAY = "TODAY"
    URGENT = "URGENT"


class PaymentMethod(str, Enum):
    CASH = "CASH"
    CARD = "CARD"


class PaymentStatus(str, Enum):
    PENDING = "PENDING"
    PAID = "PAID"
    FAILED = "FAILED"
    REFUNDED = "REFUNDED"


class ApplicationStatus(str, Enum):
    """Ustanın sifarişə müraciətinin vəziyyəti."""

    PENDING = "PENDING"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    WITHDRAWN = "WITHDRAWN"


class NotificationType(str, Enum):
    ORDER_NEW = "ORDER_NEW"
    ORDER_ACCEPTED = "ORDER_ACCEPTED"
    ORDER_STARTED = "ORDER_STARTED"
    ORDER_COMPLETED = "ORDER_COMPLETED"
    ORDER_CANCELLED = "ORDER_CANCELLED"
    APPLICATION_NEW = "APPLICATION_NEW"
    APPLICATION_ACCEPTED = "APPLICATION_ACCEPTED"
    APPLICATION_REJECTED = "APPLICATION_REJECTED"
    MESSAGE_NEW = "MESSAGE_NEW"
    REVIEW_NEW = "REVIEW_NEW"
    PAYMENT_RECEIVED = "PAYMENT_RECEIVED"
    SYSTEM = "SYSTEM"


class MasterBadge(str, Enum):
    VERIFIED = "verified"
    PREMIUM = "premium"
    INSURED = "insured"


class SettingType(str, Enum):
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    JSON = "json"


class PortfolioType(str, Enum):
    IMAGE = "IMAGE"
    VIDEO = "VIDEO"
    BEFORE_AFTER = "BEFORE_AFTER"
