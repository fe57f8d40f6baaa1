"""Subscription offer - product catalog and purchase attempts."""

import logging
from typing import List, Optional, Sequence

from pydantic import BaseModel, ConfigDict

from dreamwizard.engine.errors import PurchaseError
from dreamwizard.engine.gateways import Product, PurchaseCapability

logger = logging.getLogger(__name__)

WEEKLY_PRODUCT_ID = 'lunara.sub.weekly'
YEARLY_PRODUCT_ID = 'lunara.sub.yearly'
PRODUCT_IDS = (WEEKLY_PRODUCT_ID, YEARLY_PRODUCT_ID)


class PurchaseOutcome(BaseModel):
    """What the paywall shows after a purchase attempt."""

    model_config = ConfigDict(frozen=True)

    success: bool
    message: Optional[str] = None
    retryable: bool = False


class SubscriptionOffer:
    """
    Backs the paywall opened at the end of onboarding.

    Store failures never propagate: they come back as a retryable
    PurchaseOutcome carrying a message for the user.
    """

    def __init__(self, purchases: PurchaseCapability,
                 product_ids: Sequence[str] = PRODUCT_IDS):
        self.purchases = purchases
        self.product_ids = tuple(product_ids)

    def available_products(self) -> List[Product]:
        """Catalog products for this offer, cheapest first. Missing ids are skipped."""
        products = []
        for product_id in self.product_ids:
            product = self.purchases.get_product(product_id)
            if product is None:
                logger.warning("Product '%s' is not in the store catalog", product_id)
                continue
            products.append(product)
        return sorted(products, key=lambda p: p.price)

    def purchase(self, product_id: str) -> PurchaseOutcome:
        """
        Try to buy a product.

        Args:
            product_id: Store product id

        Returns:
            PurchaseOutcome; success False without a message means the
            user cancelled
        """
        product = None
        if product_id in self.product_ids:
            product = self.purchases.get_product(product_id)
        if product is None:
            logger.warning("Purchase requested for unavailable product '%s'", product_id)
            return PurchaseOutcome(
                success=False,
                message="This subscription is currently unavailable. Please try again later.",
                retryable=True,
            )

        try:
            purchased = self.purchases.purchase(product)
        except PurchaseError as e:
            logger.warning("Purchase of '%s' failed: %s", product_id, e)
            return PurchaseOutcome(
                success=False,
                message=f"Purchase failed: {e}. Please try again.",
                retryable=True,
            )

        if not purchased:
            logger.info("Purchase of '%s' was cancelled", product_id)
            return PurchaseOutcome(success=False)

        logger.info("Purchased '%s'", product_id)
        return PurchaseOutcome(success=True)
