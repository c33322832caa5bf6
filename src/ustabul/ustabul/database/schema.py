"""SQLAlchemy tables.

Rows stay inside repositories; services only see the frozen domain models.
"""
from __future__ import annotations

from datetime import datetime

from ..extensions import db


def _now() -> datetime:
    return datetime.now()


class UserRow(db.Model):
    __tablename__ = "users"

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(190), unique=True, nullable=False)
    phone = db.Column(db.String(20), unique=True)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default="CUSTOMER")
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    email_verified_at = db.Column(db.DateTime)
    otp_code = db.Column(db.String(6))
    otp_expires_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, nullable=False, default=_now)

    customer = db.relationship("CustomerRow", uselist=False, back_populates="user", cascade="all, delete-orphan")
    master = db.relationship("MasterRow", uselist=False, back_populates="user", cascade="all, delete-orphan")


class CustomerRow(db.Model):
    __tablename__ = "customers"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(20))
    avatar = db.Column(db.String(255))
    address = db.Column(db.String(255))
    district = db.Column(db.String(100))
    created_at = db.Column(db.DateTime, nullable=False, default=_now)

    user = db.relationship("UserRow", back_populates="customer")


master_categories = db.Table(
    "master_categories",
    db.Column("master_id", db.Integer, db.ForeignKey("masters.id", ondelete="CASCADE"), primary_key=True),
    db.Column("category_id", db.Integer, db.ForeignKey("categories.id", ondelete="CASCADE"), primary_key=True),
)


class MasterRow(db.Model):
    __tablename__ = "masters"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    first_name = db.Column(db.String(100), nullable=False)
    last_name = db.Column(db.String(100), nullable=False)
    phone = db.Column(db.String(20))
    bio = db.Column(db.Text)
    avatar = db.Column(db.String(255))
    district = db.Column(db.String(100))
    districts = db.Column(db.JSON, nullable=False, default=list)
    experience = db.Column(db.Integer, nullable=False, default=0)
    hourly_rate = db.Column(db.Float)
    rating = db.Column(db.Float, nullable=False, default=0.0)
    review_count = db.Column(db.Integer, nullable=False, default=0)
    completed_jobs = db.Column(db.Integer, nullable=False, default=0)
    is_verified = db.Column(db.Boolean, nullable=False, default=False)
    is_premium = db.Column(db.Boolean, nullable=False, default=False)
    is_insured = db.Column(db.Boolean, nullable=False, default=False)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    working_hours_start = db.Column(db.String(5), default="09:00")
    working_hours_end = db.Column(db.String(5), default="18:00")
    created_at = db.Column(db.DateTime, nullable=False, default=_now)

    user = db.relationship("UserRow", back_populates="master")
    categories = db.relationship("CategoryRow", secondary=master_categories, lazy="selectin")
    services = db.relationship("MasterServiceRow", back_populates="master", cascade="all, delete-orphan")
    portfolio = db.relationship("PortfolioItemRow", back_populates="master", cascade="all, delete-orphan")
    availability = db.relationship("MasterAvailabilityRow", back_populates="master", cascade="all, delete-orphan")


class CategoryRow(db.Model):
    __tablename__ = "categories"

    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(100), unique=True, nullable=False)
    description = db.Column(db.String(255))
    icon = db.Column(db.String(50))
    color = db.Column(db.String(20))
    order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    subcategories = db.relationship(
        "SubcategoryRow", back_populates="category", order_by="SubcategoryRow.order", cascade="all, delete-orphan"
    )


class SubcategoryRow(db.Model):
    __tablename__ = "subcategories"

    id = db.Column(db.Integer, primary_key=True)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id", ondelete="CASCADE"), nullable=False)
    name = db.Column(db.String(100), nullable=False)
    slug = db.Column(db.String(100), nullable=False)
    description = db.Column(db.String(255))
    base_price = db.Column(db.Float)
    order = db.Column(db.Integer, nullable=False, default=0)
    is_active = db.Column(db.Boolean, nullable=False, default=True)

    category = db.relationship("CategoryRow", back_populates="subcategories")

    __table_args__ = (db.UniqueConstraint("category_id", "slug", name="uq_subcategory_slug"),)


class MasterServiceRow(db.Model):
    __tablename__ = "master_services"

    id = db.Column(db.Integer, primary_key=True)
    master_id = db.Column(db.Integer, db.ForeignKey("masters.id", ondelete="CASCADE"), nullable=False)
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"))
    name = db.Column(db.String(150), nullable=False)
    description = db.Column(db.Text)
    price = db.Column(db.Float, nullable=False)
    duration = db.Column(db.Integer)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    created_at = db.Column(db.DateTime, nullable=False, default=_now)

    master = db.relationship("MasterRow", back_populates="services")


class PortfolioItemRow(db.Model):
    __tablename__ = "portfolio_items"

    id = db.Column(db.Integer, primary_key=True)
    master_id = db.Column(db.Integer, db.ForeignKey("masters.id", ondelete="CASCADE"), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text)
    url = db.Column(db.String(255), nullable=False)
    thumbnail = db.Column(db.String(255))
    type = db.Column(db.String(20), nullable=False, default="IMAGE")
    before_image = db.Column(db.String(255))
    after_image = db.Column(db.String(255))
    images = db.Column(db.JSON, nullable=False, default=list)
    category = db.Column(db.String(100))
    duration = db.Column(db.String(50))
    price = db.Column(db.Float)
    created_at = db.Column(db.DateTime, nullable=False, default=_now)

    master = db.relationship("MasterRow", back_populates="portfolio")


class MasterAvailabilityRow(db.Model):
    __tablename__ = "master_availability"

    id = db.Column(db.Integer, primary_key=True)
    master_id = db.Column(db.Integer, db.ForeignKey("masters.id", ondelete="CASCADE"), nullable=False)
    date = db.Column(db.Date, nullable=False)
    start_time = db.Column(db.String(5), nullable=False)
    end_time = db.Column(db.String(5), nullable=False)
    is_available = db.Column(db.Boolean, nullable=False, default=True)

    master = db.relationship("MasterRow", back_populates="availability")


class OrderRow(db.Model):
    __tablename__ = "orders"

    id = db.Column(db.Integer, primary_key=True)
    order_number = db.Column(db.String(32), unique=True, nullable=False)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False)
    master_id = db.Column(db.Integer, db.ForeignKey("masters.id"))
    category_id = db.Column(db.Integer, db.ForeignKey("categories.id"), nullable=False)
    subcategory_id = db.Column(db.Integer, db.ForeignKey("subcategories.id"))
    service_id = db.Column(db.Integer, db.ForeignKey("master_services.id"))
    title = db.Column(db.String(200), nullable=False)
    description = db.Column(db.Text, nullable=False)
    address = db.Column(db.String(255), nullable=False)
    district = db.Column(db.String(100))
    lat = db.Column(db.Float)
    lng = db.Column(db.Float)
    scheduled_date = db.Column(db.Date, nullable=False)
    scheduled_time = db.Column(db.String(20), nullable=False)
    urgency = db.Column(db.String(20), nullable=False, default="PLANNED")
    estimated_price = db.Column(db.Float)
    urgency_fee = db.Column(db.Float, nullable=False, default=0.0)
    platform_fee = db.Column(db.Float, nullable=False, default=0.0)
    final_price = db.Column(db.Float)
    total_price = db.Column(db.Float)
    payment_method = db.Column(db.String(20), nullable=False, default="CASH")
    payment_status = db.Column(db.String(20), nullable=False, default="PENDING")
    transaction_id = db.Column(db.String(100))
    photos = db.Column(db.JSON, nullable=False, default=list)
    status = db.Column(db.String(20), nullable=False, default="PENDING")
    cancel_reason = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, nullable=False, default=_now)
    accepted_at = db.Column(db.DateTime)
    started_at = db.Column(db.DateTime)
    completed_at = db.Column(db.DateTime)
    cancelled_at = db.Column(db.DateTime)

    customer = db.relationship("CustomerRow")
    master = db.relationship("MasterRow")
    category = db.relationship("CategoryRow")
    subcategory = db.relationship("SubcategoryRow")


class JobApplicationRow(db.Model):
    __tablename__ = "job_applications"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id", ondelete="CASCADE"), nullable=False)
    master_id = db.Column(db.Integer, db.ForeignKey("masters.id", ondelete="CASCADE"), nullable=False)
    price = db.Column(db.Float, nullable=False)
    message = db.Column(db.Text)
    estimated_duration = db.Column(db.String(50))
    status = db.Column(db.String(20), nullable=False, default="PENDING")
    rejected_reason = db.Column(db.String(255))
    created_at = db.Column(db.DateTime, nullable=False, default=_now)
    accepted_at = db.Column(db.DateTime)
    rejected_at = db.Column(db.DateTime)

    master = db.relationship("MasterRow")

    __table_args__ = (db.UniqueConstraint("order_id", "master_id", name="uq_application_order_master"),)


class ReviewRow(db.Model):
    __tablename__ = "reviews"

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id", ondelete="CASCADE"), unique=True, nullable=False)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False)
    master_id = db.Column(db.Integer, db.ForeignKey("masters.id"), nullable=False)
    rating = db.Column(db.Integer, nullable=False)
    comment = db.Column(db.Text)
    photos = db.Column(db.JSON, nullable=False, default=list)
    reply = db.Column(db.Text)
    replied_at = db.Column(db.DateTime)
    helpful_count = db.Column(db.Integer, nullable=False, default=0)
    is_approved = db.Column(db.Boolean, nullable=False, default=True)
    is_hidden = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=_now)

    customer = db.relationship("CustomerRow")


class ConversationRow(db.Model):
    __tablename__ = "conversations"

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id"), nullable=False)
    master_id = db.Column(db.Integer, db.ForeignKey("masters.id"), nullable=False)
    order_id = db.Column(db.Integer, db.ForeignKey("orders.id"))
    last_message_at = db.Column(db.DateTime, nullable=False, default=_now)
    created_at = db.Column(db.DateTime, nullable=False, default=_now)

    customer = db.relationship("CustomerRow")
    master = db.relationship("MasterRow")


class MessageRow(db.Model):
    __tablename__ = "messages"

    id = db.Column(db.Integer, primary_key=True)
    conversation_id = db.Column(db.Integer, db.ForeignKey("conversations.id", ondelete="CASCADE"), nullable=False)
    sender_user_id = db.Column(db.Integer, db.ForeignKey("users.id"), nullable=False)
    content = db.Column(db.Text, nullable=False)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    created_at = db.Column(db.DateTime, nullable=False, default=_now)


class NotificationRow(db.Model):
    __tablename__ = "notifications"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    type = db.Column(db.String(40), nullable=False)
    title = db.Column(db.String(200), nullable=False)
    message = db.Column(db.Text, nullable=False)
    data = db.Column(db.JSON)
    is_read = db.Column(db.Boolean, nullable=False, default=False)
    read_at = db.Column(db.DateTime)
    created_at = db.Column(db.DateTime, nullable=False, default=_now)


class FavoriteRow(db.Model):
    __tablename__ = "favorites"

    id = db.Column(db.Integer, primary_key=True)
    customer_id = db.Column(db.Integer, db.ForeignKey("customers.id", ondelete="CASCADE"), nullable=False)
    master_id = db.Column(db.Integer, db.ForeignKey("masters.id", ondelete="CASCADE"), nullable=False)
    created_at = db.Column(db.DateTime, nullable=False, default=_now)

    master = db.relationship("MasterRow")

    __table_args__ = (db.UniqueConstraint("customer_id", "master_id", name="uq_favorite"),)


class LoginHistoryRow(db.Model):
    __tablename__ = "login_history"

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    ip_address = db.Column(db.String(64))
    user_agent = db.Column(db.String(255))
    device = db.Column(db.String(50))
    created_at = db.Column(db.DateTime, nullable=False, default=_now)


class SystemSettingRow(db.Model):
    __tablename__ = "system_settings"

    id = db.Column(db.Integer, primary_key=True)
    key = db.Column(db.String(100), unique=True, nullable=False)
    value = db.Column(db.Text, nullable=False)
    type = db.Column(db.String(20), nullable=False, default="string")
    category = db.Column(db.String(50), nullable=False, default="general")
    updated_at = db.Column(db.DateTime, nullable=False, default=_now, onupdate=_now)
