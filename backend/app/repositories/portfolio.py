"""Storage access for instruments, lots, trades, capital, settings and SIPs.

The repository converts ORM rows into the frozen records of ``etf_shop`` so
that the accounting core never sees a session-bound object.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal
from typing import Iterable, Mapping, Sequence

from sqlalchemy import delete, func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ConflictError, NotFoundError
from app.models import (
    CapitalTransaction as CapitalTransactionRow,
    DailyActivity as DailyActivityRow,
    Holding,
    Instrument as InstrumentRow,
    MarketData,
    Setting,
    SipEntry,
    Trade,
)
from etf_shop.matching import LotChange
from etf_shop.models import (
    ActivityKind,
    CapitalTransaction,
    CapitalTransactionType,
    DailyActivity,
    Instrument,
    Lot,
    MarketSnapshot,
    RealizedTrade,
    SipFrequency,
    SipPlan,
    TradingRules,
)

logger = logging.getLogger(__name__)


def _decimal(value: object) -> Decimal:
    return Decimal(str(value)) if value is not None else Decimal("0")


def _to_instrument(row: InstrumentRow) -> Instrument:
    return Instrument(
        id=row.id,
        symbol=row.symbol,
        provider_symbol=row.provider_symbol,
        name=row.name,
        category=row.category,
    )


def _to_lot(row: Holding) -> Lot:
    return Lot(
        id=row.id,
        symbol=row.instrument.symbol,
        buy_date=row.buy_date,
        buy_price=_decimal(row.buy_price),
        quantity=int(row.quantity),
        created_at=row.created_at,
        instrument_id=row.instrument_id,
    )


def _to_trade(row: Trade) -> RealizedTrade:
    return RealizedTrade(
        id=row.id,
        instrument_id=row.instrument_id,
        symbol=row.instrument.symbol,
        buy_date=row.buy_date,
        sell_date=row.sell_date,
        buy_price=_decimal(row.buy_price),
        sell_price=_decimal(row.sell_price),
        quantity=int(row.quantity),
        profit=_decimal(row.profit),
        profit_percent=_decimal(row.profit_percent),
        holding_days=int(row.holding_days),
    )


def _to_capital(row: CapitalTransactionRow) -> CapitalTransaction:
    return CapitalTransaction(
        id=row.id,
        type=CapitalTransactionType(row.type),
        amount=_decimal(row.amount),
        date=row.date,
        notes=row.notes,
    )


def _to_snapshot(symbol: str, row: MarketData) -> MarketSnapshot:
    return MarketSnapshot(
        symbol=symbol,
        cmp=_decimal(row.cmp),
        high_52w=_decimal(row.high_52w),
        low_52w=_decimal(row.low_52w),
        prev_close=_decimal(row.prev_close),
        change=_decimal(row.change_amount),
        change_percent=_decimal(row.change_percent),
        volume=int(row.volume or 0),
        dma20=_decimal(row.dma_20),
        dma_distance=_decimal(row.dma_distance),
        updated_at=row.updated_at,
    )


def _to_sip(row: SipEntry) -> SipPlan:
    return SipPlan(
        id=row.id,
        symbol=row.instrument.symbol,
        amount=_decimal(row.amount),
        frequency=SipFrequency(row.frequency),
        next_date=row.next_date,
        is_active=bool(row.is_active),
    )


class PortfolioRepository:
    """CRUD over one ``AsyncSession``; every write commits before returning."""

    def __init__(self, session: AsyncSession, *, provider_suffix: str = ".NS") -> None:
        self._session = session
        self._provider_suffix = provider_suffix

    @property
    def session(self) -> AsyncSession:
        return self._session

    # Instruments

    async def list_instruments(self) -> list[Instrument]:
        result = await self._session.execute(
            select(InstrumentRow).order_by(InstrumentRow.category, InstrumentRow.symbol)
        )
        return [_to_instrument(row) for row in result.scalars().all()]

    async def get_instrument(self, instrument_id: int) -> Instrument:
        row = await self._session.get(InstrumentRow, instrument_id)
        if row is None:
            raise NotFoundError(f"ETF {instrument_id} not found")
        return _to_instrument(row)

    async def find_instrument(self, symbol: str) -> Instrument | None:
        row = await self._instrument_row(symbol)
        return _to_instrument(row) if row is not None else None

    async def _instrument_row(self, symbol: str) -> InstrumentRow | None:
        result = await self._session.execute(
            select(InstrumentRow).where(InstrumentRow.symbol == symbol.strip().upper())
        )
        return result.scalars().first()

    async def _require_instrument_row(self, symbol: str) -> InstrumentRow:
        row = await self._instrument_row(symbol)
        if row is None:
            raise NotFoundError(f"Unknown ETF symbol {symbol.strip().upper()}")
        return row

    async def add_instrument(
        self,
        symbol: str,
        name: str,
        category: str | None = None,
        provider_symbol: str | None = None,
    ) -> Instrument:
        normalized = symbol.strip().upper()
        if not normalized:
            raise ValueError("Symbol must not be empty")
        if await self._instrument_row(normalized) is not None:
            raise ConflictError(f"ETF {normalized} already exists")
        row = InstrumentRow(
            symbol=normalized,
            provider_symbol=(provider_symbol or f"{normalized}{self._provider_suffix}").strip().upper(),
            name=name.strip(),
            category=category.strip() if category else None,
        )
        self._session.add(row)
        await self._session.commit()
        await self._session.refresh(row)
        return _to_instrument(row)

    async def add_instruments(self, entries: Iterable[Mapping[str, str]]) -> int:
        """Bulk insert for seeding; existing symbols are skipped."""

        existing = set((await self._session.execute(select(InstrumentRow.symbol))).scalars().all())
        added = 0
        for entry in entries:
            normalized = entry["symbol"].strip().upper()
            if normalized in existing:
                continue
            self._session.add(
                InstrumentRow(
                    symbol=normalized,
                    provider_symbol=f"{normalized}{self._provider_suffix}",
                    name=entry.get("name", normalized),
                    category=entry.get("category"),
                )
            )
            existing.add(normalized)
            added += 1
        await self._session.commit()
        return added

    async def delete_instrument(self, instrument_id: int) -> None:
        row = await self._session.get(InstrumentRow, instrument_id)
        if row is None:
            raise NotFoundError(f"ETF {instrument_id} not found")
        for model, label in ((Holding, "open lots"), (Trade, "realized trades")):
            count = await self._session.scalar(
                select(func.count()).select_from(model).where(model.instrument_id == instrument_id)
            )
            if count:
                raise ConflictError(f"ETF {row.symbol} still has {label}")
        await self._session.delete(row)
        await self._session.commit()

    # Market snapshots

    async def list_market_rows(self) -> list[tuple[Instrument, MarketSnapshot | None]]:
        result = await self._session.execute(
            select(InstrumentRow).execution_options(populate_existing=True)
        )
        rows: list[tuple[Instrument, MarketSnapshot | None]] = []
        for row in result.scalars().all():
            snapshot = _to_snapshot(row.symbol, row.market_data) if row.market_data is not None else None
            rows.append((_to_instrument(row), snapshot))
        return rows

    async def latest_prices(self) -> dict[str, Decimal]:
        result = await self._session.execute(
            select(InstrumentRow.symbol, MarketData.cmp).join(MarketData, MarketData.instrument_id == InstrumentRow.id)
        )
        return {symbol: _decimal(cmp) for symbol, cmp in result.all() if cmp is not None}

    async def market_last_updated(self) -> datetime | None:
        return await self._session.scalar(select(func.max(MarketData.updated_at)))

    async def upsert_snapshot(self, instrument_id: int, snapshot: MarketSnapshot) -> None:
        result = await self._session.execute(select(MarketData).where(MarketData.instrument_id == instrument_id))
        row = result.scalars().first()
        if row is None:
            row = MarketData(instrument_id=instrument_id)
            self._session.add(row)
        row.cmp = snapshot.cmp
        row.high_52w = snapshot.high_52w
        row.low_52w = snapshot.low_52w
        row.prev_close = snapshot.prev_close
        row.change_amount = snapshot.change
        row.change_percent = snapshot.change_percent
        row.volume = snapshot.volume
        row.dma_20 = snapshot.dma20 or None
        row.dma_distance = snapshot.dma_distance if snapshot.dma20 else None
        row.updated_at = snapshot.updated_at or datetime.utcnow()
        await self._session.commit()

    # Lots

    async def list_lots(self, symbol: str | None = None) -> list[Lot]:
        stmt = select(Holding).join(Holding.instrument)
        if symbol:
            stmt = stmt.where(InstrumentRow.symbol == symbol.strip().upper())
        stmt = stmt.order_by(Holding.buy_date.desc(), Holding.created_at.desc(), Holding.id.desc())
        result = await self._session.execute(stmt)
        return [_to_lot(row) for row in result.scalars().all()]

    async def get_lot(self, lot_id: int) -> Lot:
        row = await self._session.get(Holding, lot_id)
        if row is None:
            raise NotFoundError(f"Holding {lot_id} not found")
        return _to_lot(row)

    async def add_lot(self, symbol: str, buy_date: date, buy_price: Decimal, quantity: int) -> Lot:
        instrument = await self._require_instrument_row(symbol)
        row = Holding(
            instrument=instrument,
            buy_date=buy_date,
            buy_price=Decimal(buy_price),
            quantity=quantity,
            created_at=datetime.utcnow(),
        )
        self._session.add(row)
        await self._session.commit()
        await self._session.refresh(row)
        return _to_lot(row)

    async def update_lot(
        self,
        lot_id: int,
        *,
        buy_date: date | None = None,
        buy_price: Decimal | None = None,
        quantity: int | None = None,
    ) -> Lot:
        row = await self._session.get(Holding, lot_id)
        if row is None:
            raise NotFoundError(f"Holding {lot_id} not found")
        if buy_date is not None:
            row.buy_date = buy_date
        if buy_price is not None:
            row.buy_price = Decimal(buy_price)
        if quantity is not None:
            row.quantity = quantity
        await self._session.commit()
        await self._session.refresh(row)
        return _to_lot(row)

    async def delete_lot(self, lot_id: int) -> None:
        row = await self._session.get(Holding, lot_id)
        if row is None:
            raise NotFoundError(f"Holding {lot_id} not found")
        await self._session.delete(row)
        await self._session.commit()

    async def apply_lot_changes(self, changes: Sequence[LotChange]) -> None:
        """Replace or delete source lots after a sale, in one commit."""

        for change in changes:
            row = await self._session.get(Holding, change.lot_id)
            if row is None:
                raise NotFoundError(f"Holding {change.lot_id} not found")
            if change.deletes_lot:
                await self._session.delete(row)
            else:
                row.quantity = change.new_quantity
        await self._session.commit()

    # Trades

    async def list_trades(self) -> list[RealizedTrade]:
        result = await self._session.execute(
            select(Trade).order_by(Trade.sell_date.desc(), Trade.created_at.desc(), Trade.id.desc())
        )
        return [_to_trade(row) for row in result.scalars().all()]

    async def add_trades(self, trades: Sequence[RealizedTrade]) -> list[RealizedTrade]:
        """Store trades in one commit and return them with their ids."""

        rows: list[Trade] = []
        for trade in trades:
            instrument = None
            if trade.instrument_id is not None:
                instrument = await self._session.get(InstrumentRow, trade.instrument_id)
            if instrument is None:
                instrument = await self._require_instrument_row(trade.symbol)
            row = Trade(
                instrument=instrument,
                buy_date=trade.buy_date,
                sell_date=trade.sell_date,
                buy_price=trade.buy_price,
                sell_price=trade.sell_price,
                quantity=trade.quantity,
                profit=trade.profit,
                profit_percent=trade.profit_percent,
                holding_days=trade.holding_days,
            )
            self._session.add(row)
            rows.append(row)
        await self._session.commit()
        return [_to_trade(row) for row in rows]

    async def delete_trade(self, trade_id: int) -> None:
        row = await self._session.get(Trade, trade_id)
        if row is None:
            raise NotFoundError(f"Trade {trade_id} not found")
        await self._session.delete(row)
        await self._session.commit()

    # Capital

    async def list_capital_transactions(self) -> list[CapitalTransaction]:
        result = await self._session.execute(
            select(CapitalTransactionRow).order_by(CapitalTransactionRow.date.desc(), CapitalTransactionRow.id.desc())
        )
        return [_to_capital(row) for row in result.scalars().all()]

    async def add_capital_transaction(
        self,
        type: CapitalTransactionType,
        amount: Decimal,
        on: date,
        notes: str | None = None,
    ) -> CapitalTransaction:
        row = CapitalTransactionRow(
            type=CapitalTransactionType(type).value,
            amount=Decimal(amount),
            date=on,
            notes=notes,
        )
        self._session.add(row)
        await self._session.commit()
        await self._session.refresh(row)
        return _to_capital(row)

    # Settings

    async def get_setting_values(self) -> dict[str, str]:
        result = await self._session.execute(select(Setting))
        return {row.key: row.value for row in result.scalars().all()}

    async def get_rules(self) -> TradingRules:
        return TradingRules.from_mapping(await self.get_setting_values())

    async def set_settings(self, values: Mapping[str, object]) -> TradingRules:
        """Write only the given keys; other settings keep their stored value."""

        for key, value in values.items():
            if value is None:
                continue
            row = await self._session.get(Setting, key)
            if row is None:
                self._session.add(Setting(key=key, value=str(value)))
            else:
                row.value = str(value)
        await self._session.commit()
        return await self.get_rules()

    async def ensure_default_settings(self) -> None:
        stored = await self.get_setting_values()
        missing = {k: v for k, v in TradingRules().to_mapping().items() if k not in stored}
        if missing:
            await self.set_settings(missing)

    # Daily activity

    async def get_activity(self, on: date) -> DailyActivity:
        # the counter is bumped by a core upsert, so cached rows go stale
        result = await self._session.execute(
            select(DailyActivityRow)
            .where(DailyActivityRow.date == on)
            .execution_options(populate_existing=True)
        )
        row = result.scalars().first()
        if row is None:
            return DailyActivity(date=on)
        return DailyActivity(date=row.date, buy_count=row.buy_count or 0, sell_count=row.sell_count or 0)

    async def increment_activity(self, on: date, kind: ActivityKind) -> DailyActivity:
        """Insert the day's counter or bump it in a single statement."""

        column = "buy_count" if ActivityKind(kind) == ActivityKind.BUY else "sell_count"
        dialect = self._session.get_bind().dialect.name
        insert = pg_insert if dialect == "postgresql" else sqlite_insert
        values = {"date": on, "buy_count": 0, "sell_count": 0, "created_at": datetime.utcnow()}
        values[column] = 1
        stmt = insert(DailyActivityRow).values(**values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[DailyActivityRow.date],
            set_={column: getattr(DailyActivityRow, column) + 1},
        )
        await self._session.execute(stmt)
        await self._session.commit()
        logger.debug("Recorded %s activity for %s", ActivityKind(kind).value, on)
        return await self.get_activity(on)

    # SIP plans

    async def list_sip_plans(self) -> list[SipPlan]:
        result = await self._session.execute(select(SipEntry).order_by(SipEntry.next_date, SipEntry.id))
        return [_to_sip(row) for row in result.scalars().all()]

    async def add_sip_plan(
        self,
        symbol: str,
        amount: Decimal,
        frequency: SipFrequency,
        next_date: date,
    ) -> SipPlan:
        instrument = await self._require_instrument_row(symbol)
        row = SipEntry(
            instrument=instrument,
            amount=Decimal(amount),
            frequency=SipFrequency(frequency).value,
            next_date=next_date,
            is_active=True,
        )
        self._session.add(row)
        await self._session.commit()
        await self._session.refresh(row)
        return _to_sip(row)

    async def update_sip_plan(
        self,
        plan_id: int,
        *,
        amount: Decimal | None = None,
        frequency: SipFrequency | None = None,
        next_date: date | None = None,
        is_active: bool | None = None,
    ) -> SipPlan:
        row = await self._session.get(SipEntry, plan_id)
        if row is None:
            raise NotFoundError(f"SIP {plan_id} not found")
        if amount is not None:
            row.amount = Decimal(amount)
        if frequency is not None:
            row.frequency = SipFrequency(frequency).value
        if next_date is not None:
            row.next_date = next_date
        if is_active is not None:
            row.is_active = is_active
        await self._session.commit()
        await self._session.refresh(row)
        return _to_sip(row)

    async def delete_sip_plan(self, plan_id: int) -> None:
        result = await self._session.execute(delete(SipEntry).where(SipEntry.id == plan_id))
        if not result.rowcount:
            raise NotFoundError(f"SIP {plan_id} not found")
        await self._session.commit()


__all__ = ["PortfolioRepository"]
