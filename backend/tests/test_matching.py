"""FIFO/LIFO lot matching tests."""

from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from decimal import Decimal

from etf_shop.matching import LotMethod, liquidation_plan, match_lots, order_lots, realize_trade, sell_single_lot
from etf_shop.models import Lot


def build_lots() -> list[Lot]:
    return [
        Lot(id=1, symbol="BANKBEES", buy_date=date(2024, 1, 10), buy_price=Decimal("450"), quantity=10),
        Lot(id=2, symbol="BANKBEES", buy_date=date(2024, 2, 10), buy_price=Decimal("440"), quantity=10),
        Lot(id=3, symbol="BANKBEES", buy_date=date(2024, 3, 10), buy_price=Decimal("430"), quantity=10),
    ]


def _quantities(lots: list[Lot]) -> dict[int, int]:
    return {lot.id: lot.quantity for lot in lots}


def test_fifo_consumes_oldest_first():
    result = match_lots(build_lots(), 15, LotMethod.FIFO)
    assert [(fill.lot.id, fill.quantity_sold) for fill in result.fills] == [(1, 10), (2, 5)]
    assert _quantities(result.remaining) == {2: 5, 3: 10}


def test_lifo_consumes_newest_first():
    result = match_lots(build_lots(), 15, LotMethod.LIFO)
    assert [(fill.lot.id, fill.quantity_sold) for fill in result.fills] == [(3, 10), (2, 5)]
    assert _quantities(result.remaining) == {1: 10, 2: 5}


def test_selling_everything_empties_remaining():
    result = match_lots(build_lots(), 30, "FIFO")
    assert result.quantity_sold == 30
    assert result.remaining == []


def test_selling_zero_leaves_lots_untouched():
    lots = build_lots()
    result = match_lots(lots, 0, LotMethod.LIFO)
    assert result.fills == []
    assert _quantities(result.remaining) == _quantities(lots)


def test_oversell_consumes_all_without_raising():
    result = match_lots(build_lots(), 45, LotMethod.FIFO)
    assert result.quantity_sold == 30
    assert result.remaining == []


def test_partial_fill_does_not_mutate_source_lot():
    lots = build_lots()
    match_lots(lots, 15, LotMethod.FIFO)
    assert lots[1].quantity == 10


def test_liquidation_plan_emits_replace_and_delete_instructions():
    plan = liquidation_plan(match_lots(build_lots(), 15, LotMethod.LIFO), Decimal("460"), date(2024, 4, 10))
    changes = {change.lot_id: change for change in plan.lot_changes}
    assert changes[3].deletes_lot
    assert changes[2].new_quantity == 5 and not changes[2].deletes_lot
    assert sum(trade.quantity for trade in plan.trades) == 15
    assert plan.trades[0].profit == Decimal("300")
    assert plan.trades[1].profit == Decimal("100")


def test_realize_trade_figures():
    lot = build_lots()[0]
    trade = realize_trade(lot, 4, Decimal("495"), date(2024, 2, 9))
    assert trade.profit == Decimal("180")
    assert trade.profit_percent == Decimal("10")
    assert trade.holding_days == 30
    assert trade.invested_value == Decimal("1800")


def test_realize_trade_allows_sell_before_buy():
    lot = build_lots()[0]
    trade = realize_trade(lot, 1, Decimal("450"), date(2024, 1, 5))
    assert trade.holding_days == -5


def test_sell_single_lot_in_part():
    lot = build_lots()[0]
    plan = sell_single_lot(lot, Decimal("500"), date(2024, 6, 1), quantity=4)
    assert plan.lot_changes[0].new_quantity == 6
    assert plan.remaining[0].quantity == 6
    assert plan.trades[0].quantity == 4


def test_sell_single_lot_whole_by_default():
    lot = build_lots()[2]
    plan = sell_single_lot(lot, Decimal("420"), date(2024, 6, 1))
    assert plan.lot_changes[0].deletes_lot
    assert plan.remaining == []
    assert plan.trades[0].profit == Decimal("-100")


def test_same_day_lots_follow_creation_order():
    day = date(2024, 4, 1)
    morning = Lot(7, "BANKBEES", day, Decimal("445"), 4, created_at=datetime(2024, 4, 1, 9, 30))
    evening = Lot(5, "BANKBEES", day, Decimal("441"), 4, created_at=datetime(2024, 4, 1, 15, 0))
    assert [lot.id for lot in order_lots([evening, morning], LotMethod.FIFO)] == [7, 5]
    assert [lot.id for lot in order_lots([morning, evening], LotMethod.LIFO)] == [5, 7]

    untimed = [replace(morning, created_at=None), replace(evening, created_at=None)]
    assert [lot.id for lot in order_lots(untimed, LotMethod.LIFO)] == [7, 5]
