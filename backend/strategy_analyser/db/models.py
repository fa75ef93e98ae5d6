"""SQLAlchemy ORM models for the strategy run store."""
from __future__ import annotations

import enum
import datetime as dt
from datetime import datetime
from typing import List, Optional

from sqlalchemy import (
    Boolean,
    Date,
    DateTime,
    Enum,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base


class ParameterType(str, enum.Enum):
    """Declared type of a stored strategy parameter value."""

    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    DATE = "date"


class EventType(str, enum.Enum):
    """Kind of detailed event recorded during a run."""

    TP_NEAR_MISS = "tp_near_miss"
    FILL_NEAR_MISS = "fill_near_miss"
    SL_ADJUSTMENT = "sl_adjustment"


def _enum_values(enum_cls: type[enum.Enum]) -> list[str]:
    return [member.value for member in enum_cls]


class Strategy(Base):
    """A trading strategy whose runs are uploaded and compared."""

    __tablename__ = "strategies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)
    notes: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )

    runs: Mapped[List["StrategyRun"]] = relationship(
        "StrategyRun",
        back_populates="strategy",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class StrategyRun(Base):
    """One recorded backtest execution of a strategy."""

    __tablename__ = "strategy_runs"
    __table_args__ = (
        Index("ix_strategy_runs_strategy_id", "strategy_id"),
        Index("ix_strategy_runs_created_at", "created_at"),
        Index(
            "uq_strategy_runs_baseline",
            "strategy_id",
            unique=True,
            postgresql_where=text("is_baseline"),
            sqlite_where=text("is_baseline"),
        ),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    strategy_id: Mapped[int] = mapped_column(
        ForeignKey("strategies.id", ondelete="CASCADE"), nullable=False
    )
    run_name: Mapped[Optional[str]] = mapped_column(String(255))
    run_description: Mapped[Optional[str]] = mapped_column(Text)
    net_pnl: Mapped[float] = mapped_column(Float, nullable=False)
    total_trades: Mapped[Optional[int]] = mapped_column(Integer)
    win_rate: Mapped[Optional[float]] = mapped_column(Float)
    profit_factor: Mapped[Optional[float]] = mapped_column(Float)
    max_drawdown: Mapped[Optional[float]] = mapped_column(Float)
    sharpe_ratio: Mapped[Optional[float]] = mapped_column(Float)
    is_baseline: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default=text("false")
    )
    raw_data: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    strategy: Mapped[Strategy] = relationship("Strategy", back_populates="runs")
    daily_pnl: Mapped[List["DailyPnl"]] = relationship(
        "DailyPnl", back_populates="run", cascade="all, delete-orphan", passive_deletes=True
    )
    parameters: Mapped[List["StrategyParameter"]] = relationship(
        "StrategyParameter", back_populates="run", cascade="all, delete-orphan", passive_deletes=True
    )
    metrics: Mapped[List["StrategyMetric"]] = relationship(
        "StrategyMetric", back_populates="run", cascade="all, delete-orphan", passive_deletes=True
    )
    events: Mapped[List["StrategyEvent"]] = relationship(
        "StrategyEvent", back_populates="run", cascade="all, delete-orphan", passive_deletes=True
    )
    trades: Mapped[List["StrategyTradeSummary"]] = relationship(
        "StrategyTradeSummary",
        back_populates="run",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class DailyPnl(Base):
    """Per-day profit and loss of a run."""

    __tablename__ = "daily_pnl"
    __table_args__ = (
        UniqueConstraint("run_id", "date", name="uq_daily_pnl_run_id_date"),
        Index("ix_daily_pnl_run_id", "run_id"),
    )

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_id: Mapped[int] = mapped_column(
        ForeignKey("strategy_runs.id", ondelete="CASCADE"), nullable=False
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    pnl: Mapped[float] = mapped_column(Float, nullable=False)
    trades: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    highest_intraday_pnl: Mapped[Optional[float]] = mapped_column(Float)
    lowest_intraday_pnl: Mapped[Optional[float]] = mapped_column(Float)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    run: Mapped[StrategyRun] = relationship("StrategyRun", back_populates="daily_pnl")


class StrategyParameter(Base):
    """A named parameter value a run was executed with."""

    __tablename__ = "strategy_parameters"
    __table_args__ = (Index("ix_strategy_parameters_run_id", "run_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_id: Mapped[int] = mapped_column(
        ForeignKey("strategy_runs.id", ondelete="CASCADE"), nullable=False
    )
    parameter_name: Mapped[str] = mapped_column(String(255), nullable=False)
    parameter_value: Mapped[str] = mapped_column(Text, nullable=False)
    parameter_type: Mapped[ParameterType] = mapped_column(
        Enum(
            ParameterType,
            name="parameter_type",
            native_enum=False,
            create_constraint=True,
            values_callable=_enum_values,
            length=16,
        ),
        nullable=False,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    run: Mapped[StrategyRun] = relationship("StrategyRun", back_populates="parameters")


class StrategyMetric(Base):
    """Strategy specific metric computed for a run."""

    __tablename__ = "strategy_metrics"
    __table_args__ = (Index("ix_strategy_metrics_run_id", "run_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_id: Mapped[int] = mapped_column(
        ForeignKey("strategy_runs.id", ondelete="CASCADE"), nullable=False
    )
    metric_name: Mapped[str] = mapped_column(String(255), nullable=False)
    metric_value: Mapped[float] = mapped_column(Float, nullable=False)
    metric_description: Mapped[Optional[str]] = mapped_column(Text)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    run: Mapped[StrategyRun] = relationship("StrategyRun", back_populates="metrics")


class StrategyEvent(Base):
    """Near misses and stop-loss adjustments observed during a run."""

    __tablename__ = "strategy_events"
    __table_args__ = (Index("ix_strategy_events_run_id", "run_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_id: Mapped[int] = mapped_column(
        ForeignKey("strategy_runs.id", ondelete="CASCADE"), nullable=False
    )
    event_type: Mapped[EventType] = mapped_column(
        Enum(
            EventType,
            name="event_type",
            native_enum=False,
            create_constraint=True,
            values_callable=_enum_values,
            length=32,
        ),
        nullable=False,
    )
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[str] = mapped_column(String(16), nullable=False)
    trade_id: Mapped[Optional[str]] = mapped_column(String(64))
    direction: Mapped[Optional[str]] = mapped_column(String(16))
    target: Mapped[Optional[str]] = mapped_column(String(64))
    closest_distance: Mapped[Optional[str]] = mapped_column(String(64))
    reason: Mapped[Optional[str]] = mapped_column(Text)
    trigger: Mapped[Optional[str]] = mapped_column(String(255))
    adjustment: Mapped[Optional[str]] = mapped_column(String(255))
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    run: Mapped[StrategyRun] = relationship("StrategyRun", back_populates="events")


class StrategyTradeSummary(Base):
    """Per-trade excursion summary extracted from a run log."""

    __tablename__ = "strategy_trade_summaries"
    __table_args__ = (Index("ix_strategy_trade_summaries_run_id", "run_id"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    run_id: Mapped[int] = mapped_column(
        ForeignKey("strategy_runs.id", ondelete="CASCADE"), nullable=False
    )
    trade_id: Mapped[str] = mapped_column(String(64), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    time: Mapped[str] = mapped_column(String(16), nullable=False)
    direction: Mapped[str] = mapped_column(String(16), nullable=False)
    line: Mapped[str] = mapped_column(String(64), nullable=False)
    entry_price: Mapped[float] = mapped_column(Float, nullable=False)
    high_price: Mapped[float] = mapped_column(Float, nullable=False)
    low_price: Mapped[float] = mapped_column(Float, nullable=False)
    max_profit: Mapped[float] = mapped_column(Float, nullable=False)
    max_loss: Mapped[float] = mapped_column(Float, nullable=False)
    actual_pnl: Mapped[float] = mapped_column(Float, nullable=False)
    bars: Mapped[int] = mapped_column(Integer, nullable=False)
    max_profit_vs_target: Mapped[Optional[float]] = mapped_column(Float)
    max_loss_vs_stop: Mapped[Optional[float]] = mapped_column(Float)
    profit_efficiency: Mapped[Optional[float]] = mapped_column(Float)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    run: Mapped[StrategyRun] = relationship("StrategyRun", back_populates="trades")


__all__ = [
    "DailyPnl",
    "EventType",
    "ParameterType",
    "Strategy",
    "StrategyEvent",
    "StrategyMetric",
    "StrategyParameter",
    "StrategyRun",
    "StrategyTradeSummary",
]
