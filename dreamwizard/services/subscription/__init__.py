"""Subscription offer shown after onboarding."""

from .offer import (
    WEEKLY_PRODUCT_ID,
    YEARLY_PRODUCT_ID,
    PurchaseOutcome,
    SubscriptionOffer,
)

__all__ = [
    'WEEKLY_PRODUCT_ID',
    'YEARLY_PRODUCT_ID',
    'PurchaseOutcome',
    'SubscriptionOffer',
]
