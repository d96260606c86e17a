import logging
import random
from typing import Optional, Protocol

from config import settings
from models.subscription_bundle import SubscriptionBundle

logger = logging.getLogger(__name__)


class PaymentGateway(Protocol):
    def charge_renewal(self, bundle: SubscriptionBundle) -> bool:
        """Charge the renewal price of ``bundle``. Returns True when paid."""
        ...


class SimulatedPaymentGateway:
    """Stand-in for a card processor: succeeds with a fixed probability."""

    def __init__(self, success_rate: Optional[float] = None, rng: Optional[random.Random] = None):
        self.success_rate = settings.RENEWAL_PAYMENT_SUCCESS_RATE if success_rate is None else success_rate
        self.rng = rng or random.Random()

    def charge_renewal(self, bundle: SubscriptionBundle) -> bool:
        paid = self.rng.random() < self.success_rate
        logger.info(
            f"Renewal charge of {bundle.price} for bundle {bundle.id} "
            f"{'succeeded' if paid else 'failed'}"
        )
        return paid
