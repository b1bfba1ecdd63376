"""Target pricing and averaging signal tests."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

import pytest

from etf_shop.lots import average_price, summarize_position
from etf_shop.models import Lot, TradingRules
from etf_shop.signals import averaging_signal, latest_lot, passes_buy_filter, should_average, should_sip
from etf_shop.targets import InvalidArgument, dynamic_target_percent, target_price


def _lot(lot_id: int, price: str, quantity: int, day: date) -> Lot:
    return Lot(id=lot_id, symbol="NIFTYBEES", buy_date=day, buy_price=Decimal(price), quantity=quantity)


def test_average_price_is_quantity_weighted():
    lots = [
        _lot(1, "100", 10, date(2024, 1, 1)),
        _lot(2, "90", 30, date(2024, 2, 1)),
    ]
    avg = average_price(lots)
    assert avg == Decimal("92.5")
    assert min(lot.buy_price for lot in lots) <= avg <= max(lot.buy_price for lot in lots)


def test_average_price_of_empty_group_is_zero():
    assert average_price([]) == Decimal("0")


def test_target_price_uses_percent_for_large_positions():
    rules = TradingRules(profit_target_percent=Decimal("6"), min_profit_amount=Decimal("500"))
    assert target_price(Decimal("100"), 1000, rules) == Decimal("106")


def test_target_price_uses_profit_floor_for_small_positions():
    rules = TradingRules(profit_target_percent=Decimal("6"), min_profit_amount=Decimal("500"))
    # 10 units need +50 each to clear the 500 floor
    assert target_price(Decimal("100"), 10, rules) == Decimal("150")


def test_target_price_never_below_average():
    rules = TradingRules(profit_target_percent=Decimal("0"), min_profit_amount=Decimal("0"))
    assert target_price(Decimal("250.5"), 7, rules) >= Decimal("250.5")


def test_target_price_rejects_empty_position():
    with pytest.raises(InvalidArgument):
        target_price(Decimal("100"), 0, TradingRules())


@pytest.mark.parametrize(
    ("used", "expected"),
    [
        (Decimal("91"), Decimal("3.12")),
        (Decimal("90"), Decimal("4.02")),
        (Decimal("75"), Decimal("4.98")),
        (Decimal("70"), Decimal("6")),
        (Decimal("50"), Decimal("6")),
    ],
)
def test_dynamic_target_bands(used, expected):
    assert dynamic_target_percent(Decimal("6"), used) == expected


def test_should_average_requires_more_than_five_percent():
    assert should_average(Decimal("100"), Decimal("95")) is False
    assert should_average(Decimal("100"), Decimal("94")) is True


def test_should_sip_requires_more_than_ten_percent():
    assert should_sip(Decimal("100"), Decimal("90")) is False
    assert should_sip(Decimal("100"), Decimal("89")) is True


def test_averaging_signal_on_price_rise_is_negative_drop():
    signal = averaging_signal(Decimal("100"), Decimal("110"))
    assert signal.drop_percent == Decimal("-10")
    assert not signal.should_average
    assert not signal.should_sip


def test_latest_lot_breaks_date_ties_by_creation_time():
    day = date(2024, 5, 1)
    early = Lot(1, "GOLDBEES", day, Decimal("60"), 5, created_at=datetime(2024, 5, 1, 9, 0))
    late = Lot(2, "GOLDBEES", day, Decimal("58"), 5, created_at=datetime(2024, 5, 1, 14, 0))
    assert latest_lot([late, early]) is late


def test_buy_filter_passes_unheld_and_gates_held():
    assert passes_buy_filter([], Decimal("100"), Decimal("2.5"))
    held = [_lot(1, "100", 10, date(2024, 1, 1))]
    assert not passes_buy_filter(held, Decimal("98"), Decimal("2.5"))
    assert passes_buy_filter(held, Decimal("97.5"), Decimal("2.5"))
    assert passes_buy_filter(held, None, Decimal("2.5"))


def test_summarize_position_falls_back_to_last_buy_price():
    lots = [
        _lot(1, "100", 10, date(2024, 1, 1)),
        _lot(2, "80", 10, date(2024, 3, 1)),
    ]
    summary = summarize_position("NIFTYBEES", lots, None, TradingRules())
    assert summary.cmp == Decimal("80")
    assert summary.total_quantity == 20
    assert summary.average_price == Decimal("90")
    assert summary.last_buy_price == Decimal("80")
    assert summary.notional_pl == Decimal("-200")
    assert summary.target_price >= summary.average_price


def test_summarize_position_uses_latest_created_lot_on_same_day():
    day = date(2024, 5, 1)
    lots = [
        Lot(2, "GOLDBEES", day, Decimal("58"), 5, created_at=datetime(2024, 5, 1, 14, 0)),
        Lot(1, "GOLDBEES", day, Decimal("60"), 5, created_at=datetime(2024, 5, 1, 9, 0)),
    ]
    summary = summarize_position("GOLDBEES", lots, Decimal("55"), TradingRules())
    assert summary.last_buy_price == Decimal("58")
    assert summary.signal.should_average is True


def test_summarize_position_rejects_empty_group():
    with pytest.raises(ValueError):
        summarize_position("GOLDBEES", [], Decimal("55"), TradingRules())
