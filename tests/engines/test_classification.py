"""
Tests for stock change reason classification.

Every StockChangeReason member must land in exactly one bucket per
direction; an unrecognised value must fail instead of defaulting.
"""

import pytest

from inventory_engines.valuation.classification import (
    WRITE_OFF_REASONS,
    InboundBucket,
    OutboundBucket,
    classify_inbound,
    classify_outbound,
)
from inventory_kernel.domain.stock_event import StockChangeReason
from inventory_kernel.exceptions import UnknownStockChangeReasonError

R = StockChangeReason


class TestClassifyInbound:
    """Tests for inbound bucket selection."""

    @pytest.mark.parametrize("priced", [True, False])
    def test_customer_return_is_returns_in(self, priced):
        assert classify_inbound(R.RETURNED_BY_CUSTOMER, priced) is InboundBucket.RETURNS_IN

    @pytest.mark.parametrize("priced", [True, False])
    def test_initial_stock_is_purchase(self, priced):
        assert classify_inbound(R.INITIAL_STOCK, priced) is InboundBucket.PURCHASES

    def test_priced_receipt_is_purchase(self):
        assert classify_inbound(R.MANUAL_UPDATE, True) is InboundBucket.PURCHASES

    def test_unpriced_correction_is_untracked(self):
        assert classify_inbound(R.MANUAL_UPDATE, False) is InboundBucket.UNTRACKED

    @pytest.mark.parametrize("reason", list(StockChangeReason))
    def test_every_reason_is_classified(self, reason):
        assert classify_inbound(reason, False) in set(InboundBucket)
        assert classify_inbound(reason, True) in set(InboundBucket)

    def test_unknown_reason_raises(self):
        with pytest.raises(UnknownStockChangeReasonError):
            classify_inbound("GIFTED", True)


class TestClassifyOutbound:
    """Tests for outbound bucket selection."""

    def test_return_to_supplier(self):
        assert classify_outbound(R.RETURNED_TO_SUPPLIER) is OutboundBucket.SUPPLIER_RETURN

    @pytest.mark.parametrize("reason", sorted(WRITE_OFF_REASONS, key=lambda r: r.value))
    def test_write_off_reasons(self, reason):
        assert classify_outbound(reason) is OutboundBucket.WRITE_OFF

    @pytest.mark.parametrize("reason", [R.SOLD, R.MANUAL_UPDATE, R.INITIAL_STOCK, R.PRICE_CHANGE])
    def test_everything_else_is_cogs(self, reason):
        assert classify_outbound(reason) is OutboundBucket.COGS

    def test_write_off_set_matches_classifier(self):
        classified = {
            r for r in StockChangeReason if classify_outbound(r) is OutboundBucket.WRITE_OFF
        }
        assert classified == WRITE_OFF_REASONS

    def test_unknown_reason_raises(self, captured_logs):
        with pytest.raises(UnknownStockChangeReasonError):
            classify_outbound("GIFTED")

        logs = captured_logs()
        assert any(
            r["message"] == "classification_unknown_reason" and r["direction"] == "outbound"
            for r in logs
        )
