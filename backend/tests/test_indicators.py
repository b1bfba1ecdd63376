"""Quote snapshot and moving-average tests."""

from __future__ import annotations

from decimal import Decimal

from etf_shop.indicators import build_quote, dma_distance, moving_average


def test_moving_average_uses_last_twenty_closes():
    closes = [float(value) for value in range(1, 26)]
    # closes 6..25
    assert moving_average(closes) == Decimal("15.5")


def test_moving_average_with_short_history_and_gaps():
    assert moving_average([10.0, None, 20.0]) == Decimal("15.0")
    assert moving_average([]) == Decimal("0")
    assert moving_average([None, None]) == Decimal("0")


def test_dma_distance_sign():
    assert dma_distance(Decimal("95"), Decimal("100")) == Decimal("-5")
    assert dma_distance(Decimal("110"), Decimal("100")) == Decimal("10")
    assert dma_distance(Decimal("110"), Decimal("0")) == Decimal("0")


def test_build_quote_derives_change_and_range():
    quote = build_quote(
        "JUNIORBEES",
        cmp=96.0,
        prev_close=100.0,
        volume=25000,
        closes=[100.0, 100.0, 100.0, 100.0],
        highs=[101.0, 105.0, None],
        lows=[95.0, 94.0, 99.0],
    )
    assert quote.cmp == Decimal("96.0")
    assert quote.change == Decimal("-4.0")
    assert quote.change_percent == Decimal("-4")
    assert quote.high_52w == Decimal("105.0")
    assert quote.low_52w == Decimal("94.0")
    assert quote.dma20 == Decimal("100.0")
    assert quote.dma_distance == Decimal("-4")
    assert quote.volume == 25000


def test_build_quote_without_history_falls_back_to_price():
    quote = build_quote("LIQUIDBEES", cmp=1000.0, prev_close=None, volume=None)
    assert quote.high_52w == quote.low_52w == Decimal("1000.0")
    assert quote.change == Decimal("0")
    assert quote.dma20 == Decimal("0")
    assert quote.dma_distance == Decimal("0")
    assert quote.volume == 0
