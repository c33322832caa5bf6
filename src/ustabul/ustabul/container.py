from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping

from .admin.service import AdminService
from .admin.sqlalchemy_admin_repository import SQLAlchemyAdminRepository
from .applications.service import ApplicationService
from .applications.sqlalchemy_application_repository import SQLAlchemyApplicationRepository
from .catalog.service import CatalogService
from .catalog.sqlalchemy_catalog_repository import SQLAlchemyCatalogRepository
from .integrations.email import EmailSender, build_email_sender
from .integrations.kapital_bank import KapitalBankGateway
from .masters.service import (
    AvailabilityService,
    FavoriteService,
    MasterAdminService,
    MasterDirectoryService,
    MasterPanelService,
    PortfolioService,
)
from .masters.sqlalchemy_master_repository import (
    SQLAlchemyAvailabilityRepository,
    SQLAlchemyFavoriteRepository,
    SQLAlchemyMasterActivityRepository,
    SQLAlchemyMasterRepository,
    SQLAlchemyPortfolioRepository,
)
from .messaging.service import MessagingService
from .messaging.sqlalchemy_message_repository import SQLAlchemyMessageRepository
from .notifications.service import NotificationService
from .notifications.sqlalchemy_notification_repository import SQLAlchemyNotificationRepository
from .orders.factory import OrderTransitionFactory
from .orders.service import OrderService
from .orders.sqlalchemy_order_repository import SQLAlchemyOrderRepository
from .payments.fees.standard_calculator import StandardFeeCalculator
from .payments.service import PaymentService
from .reviews.service import ReviewService
from .reviews.sqlalchemy_review_repository import SQLAlchemyReviewRepository
from .settings.service import SettingsService
from .settings.sqlalchemy_settings_repository import SQLAlchemySettingsRepository
from .uploads.service import UploadService
from .users.otp import OtpService
from .users.service import AuthService, UserService
from .users.sqlalchemy_user_repository import SQLAlchemyUserRepository


@dataclass(frozen=True)
class Container:
    users_repo: SQLAlchemyUserRepository
    masters_repo: SQLAlchemyMasterRepository
    catalog_repo: SQLAlchemyCatalogRepository
    orders_repo: SQLAlchemyOrderRepository

    mailer: EmailSender
    gateway: KapitalBankGateway

    auth_service: AuthService
    otp_service: OtpService
    user_service: UserService
    catalog_service: CatalogService
    settings_service: SettingsService
    notification_service: NotificationService
    master_directory: MasterDirectoryService
    master_panel: MasterPanelService
    master_admin: MasterAdminService
    portfolio_service: PortfolioService
    availability_service: AvailabilityService
    favorite_service: FavoriteService
    order_service: OrderService
    application_service: ApplicationService
    review_service: ReviewService
    messaging_service: MessagingService
    payment_service: PaymentService
    upload_service: UploadService
    admin_service: AdminService


def build_container(config: Mapping) -> Container:
    users_repo = SQLAlchemyUserRepository()
    masters_repo = SQLAlchemyMasterRepository()
    favorites_repo = SQLAlchemyFavoriteRepository()
    catalog_repo = SQLAlchemyCatalogRepository()
    orders_repo = SQLAlchemyOrderRepository()
    applications_repo = SQLAlchemyApplicationRepository()
    reviews_repo = SQLAlchemyReviewRepository()
    messages_repo = SQLAlchemyMessageRepository()
    notifications_repo = SQLAlchemyNotificationRepository()
    settings_repo = SQLAlchemySettingsRepository()
    admin_repo = SQLAlchemyAdminRepository()

    mailer = build_email_sender(config)
    gateway = KapitalBankGateway(
        merchant_id=config.get("KAPITAL_BANK_MERCHANT_ID"),
        secret_key=config.get("KAPITAL_BANK_SECRET"),
        api_url=config.get("KAPITAL_BANK_API_URL") or "https://api.kapitalbank.az/v1",
        return_url=config.get("PAYMENT_RETURN_URL") or "http://localhost:5000/payment/result",
    )

    settings_service = SettingsService(settings_repo)
    notification_service = NotificationService(notifications_repo)
    fee_calculator = StandardFeeCalculator(settings_service.commission_rate)
    user_service = UserService(users_repo)

    return Container(
        users_repo=users_repo,
        masters_repo=masters_repo,
        catalog_repo=catalog_repo,
        orders_repo=orders_repo,
        mailer=mailer,
        gateway=gateway,
        auth_service=AuthService(
            users_repo, masters_repo, require_verified_email=bool(config.get("REQUIRE_EMAIL_VERIFICATION"))
        ),
        otp_service=OtpService(
            users_repo,
            mailer,
            ttl_minutes=int(config.get("OTP_TTL_MINUTES") or 10),
            expose_code=bool(config.get("OTP_EXPOSE_CODE")),
        ),
        user_service=user_service,
        catalog_service=CatalogService(catalog_repo),
        settings_service=settings_service,
        notification_service=notification_service,
        master_directory=MasterDirectoryService(masters_repo, reviews_repo),
        master_panel=MasterPanelService(
            masters_repo, orders_repo, applications_repo, settings_service, SQLAlchemyMasterActivityRepository()
        ),
        master_admin=MasterAdminService(masters_repo, reviews_repo, users_repo, user_service),
        portfolio_service=PortfolioService(SQLAlchemyPortfolioRepository()),
        availability_service=AvailabilityService(SQLAlchemyAvailabilityRepository()),
        favorite_service=FavoriteService(favorites_repo, masters_repo, users_repo),
        order_service=OrderService(
            orders_repo,
            catalog_repo,
            masters_repo,
            users_repo,
            notification_service,
            fee_calculator=fee_calculator,
            transitions=OrderTransitionFactory(),
        ),
        application_service=ApplicationService(applications_repo, orders_repo, notification_service),
        review_service=ReviewService(reviews_repo, orders_repo, masters_repo, notification_service),
        messaging_service=MessagingService(messages_repo, users_repo, masters_repo, notification_service),
        payment_service=PaymentService(orders_repo, gateway, notification_service),
        upload_service=UploadService(config.get("UPLOAD_ROOT") or "uploads", max_mb=int(config.get("MAX_UPLOAD_MB") or 5)),
        admin_service=AdminService(admin_repo, orders_repo, settings_service),
    )
