"""Tests for the subscription offer."""

import pytest

from dreamwizard.engine.errors import PurchaseError
from dreamwizard.engine.gateways import MockPurchaseCapability, Product
from dreamwizard.services.subscription import (
    WEEKLY_PRODUCT_ID,
    YEARLY_PRODUCT_ID,
    PurchaseOutcome,
    SubscriptionOffer,
)


@pytest.fixture
def purchases():
    return MockPurchaseCapability([
        Product(id=YEARLY_PRODUCT_ID, display_name='Yearly', display_price='$39.99', price=39.99),
        Product(id=WEEKLY_PRODUCT_ID, display_name='Weekly', display_price='$4.99', price=4.99),
    ])


@pytest.fixture
def offer(purchases):
    return SubscriptionOffer(purchases)


def test_products_sorted_by_price(offer):
    assert [p.id for p in offer.available_products()] == [WEEKLY_PRODUCT_ID, YEARLY_PRODUCT_ID]


def test_missing_products_skipped():
    offer = SubscriptionOffer(MockPurchaseCapability([
        Product(id=YEARLY_PRODUCT_ID, display_name='Yearly', display_price='$39.99', price=39.99),
    ]))

    assert [p.id for p in offer.available_products()] == [YEARLY_PRODUCT_ID]


def test_successful_purchase(offer, purchases):
    assert offer.purchase(WEEKLY_PRODUCT_ID) == PurchaseOutcome(success=True)
    assert ('purchase', WEEKLY_PRODUCT_ID) in purchases.calls


def test_cancelled_purchase_has_no_message(offer, purchases):
    purchases.responses['purchase'] = False

    outcome = offer.purchase(YEARLY_PRODUCT_ID)

    assert outcome.success is False
    assert outcome.message is None
    assert outcome.retryable is False


def test_store_failure_is_retryable_message(offer, purchases):
    purchases.responses['purchase'] = PurchaseError('network unavailable')

    outcome = offer.purchase(WEEKLY_PRODUCT_ID)

    assert outcome.success is False
    assert outcome.retryable is True
    assert 'network unavailable' in outcome.message


def test_unknown_product(offer, purchases):
    outcome = offer.purchase('lunara.sub.lifetime')

    assert outcome.success is False
    assert outcome.retryable is True
    assert 'unavailable' in outcome.message
    assert not any(call[0] == 'purchase' for call in purchases.calls)
