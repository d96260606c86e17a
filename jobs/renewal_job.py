import logging
from datetime import datetime
from typing import Callable, Optional
from sqlalchemy.orm import Session

from database import SessionLocal
from repositories import MonthlyUsageRepository, SubscriptionBundleRepository, UserRepository
from services.payment_service import PaymentGateway, SimulatedPaymentGateway
from services.subscription_service import SubscriptionService, RenewalReport
from services.usage_reset_service import UsageResetService
from utils.time import utcnow

logger = logging.getLogger(__name__)


class RenewalJob:
    """
    Periodic maintenance: renews due bundles and resets monthly counters.

    Each sweep runs in its own session so one failing does not leave the
    other with a half-finished transaction.
    """

    def __init__(
        self,
        session_factory: Callable[[], Session] = SessionLocal,
        payment_gateway: Optional[PaymentGateway] = None,
    ):
        self.session_factory = session_factory
        self.payment_gateway = payment_gateway or SimulatedPaymentGateway()

    def process_renewals(self, now: Optional[datetime] = None) -> RenewalReport:
        db = self.session_factory()
        try:
            service = SubscriptionService(
                db,
                SubscriptionBundleRepository(db),
                UserRepository(db),
                MonthlyUsageRepository(db),
                payment_gateway=self.payment_gateway,
            )
            report = service.process_auto_renewals(now or utcnow())
            logger.info(
                f"Auto-renewals processed: {report.renewed} renewed, "
                f"{report.deactivated} deactivated, {report.failed} failed"
            )
            return report
        finally:
            db.close()

    def reset_usage(self, now: Optional[datetime] = None) -> int:
        db = self.session_factory()
        try:
            service = UsageResetService(db, MonthlyUsageRepository(db))
            return service.reset_monthly_usage_if_needed(now or utcnow())
        finally:
            db.close()

    def run(self, now: Optional[datetime] = None) -> RenewalReport:
        now = now or utcnow()
        logger.info("Running renewal job...")
        try:
            report = self.process_renewals(now)
            self.reset_usage(now)
            logger.info("Monthly usage reset checked")
        except Exception as e:
            logger.error(f"Error in renewal job: {str(e)}")
            raise
        logger.info("Renewal job completed")
        return report
