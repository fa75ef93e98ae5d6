"""Create the strategy run store"""

from alembic import op
import sqlalchemy as sa


revision = "0001_initial"
down_revision = None
branch_labels = None
depends_on = None


_parameter_type = sa.Enum(
    "string",
    "number",
    "boolean",
    "date",
    name="parameter_type",
    native_enum=False,
    create_constraint=True,
    length=16,
)

_event_type = sa.Enum(
    "tp_near_miss",
    "fill_near_miss",
    "sl_adjustment",
    name="event_type",
    native_enum=False,
    create_constraint=True,
    length=32,
)


def _created_at() -> sa.Column:
    return sa.Column(
        "created_at",
        sa.DateTime(timezone=True),
        nullable=False,
        server_default=sa.func.now(),
    )


def _run_id(table: str) -> sa.Column:
    return sa.Column(
        "run_id",
        sa.Integer(),
        sa.ForeignKey(
            "strategy_runs.id",
            name=f"fk_{table}_run_id_strategy_runs",
            ondelete="CASCADE",
        ),
        nullable=False,
    )


def upgrade() -> None:
    op.create_table(
        "strategies",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _created_at(),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            nullable=False,
            server_default=sa.func.now(),
        ),
        sa.PrimaryKeyConstraint("id", name="pk_strategies"),
        sa.UniqueConstraint("name", name="uq_strategies_name"),
    )

    op.create_table(
        "strategy_runs",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column(
            "strategy_id",
            sa.Integer(),
            sa.ForeignKey(
                "strategies.id",
                name="fk_strategy_runs_strategy_id_strategies",
                ondelete="CASCADE",
            ),
            nullable=False,
        ),
        sa.Column("run_name", sa.String(length=255), nullable=True),
        sa.Column("run_description", sa.Text(), nullable=True),
        sa.Column("net_pnl", sa.Float(), nullable=False),
        sa.Column("total_trades", sa.Integer(), nullable=True),
        sa.Column("win_rate", sa.Float(), nullable=True),
        sa.Column("profit_factor", sa.Float(), nullable=True),
        sa.Column("max_drawdown", sa.Float(), nullable=True),
        sa.Column("sharpe_ratio", sa.Float(), nullable=True),
        sa.Column("is_baseline", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("raw_data", sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_strategy_runs"),
    )
    op.create_index("ix_strategy_runs_strategy_id", "strategy_runs", ["strategy_id"])
    op.create_index("ix_strategy_runs_created_at", "strategy_runs", ["created_at"])
    op.create_index(
        "uq_strategy_runs_baseline",
        "strategy_runs",
        ["strategy_id"],
        unique=True,
        postgresql_where=sa.text("is_baseline"),
        sqlite_where=sa.text("is_baseline"),
    )

    op.create_table(
        "daily_pnl",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _run_id("daily_pnl"),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("pnl", sa.Float(), nullable=False),
        sa.Column("trades", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("highest_intraday_pnl", sa.Float(), nullable=True),
        sa.Column("lowest_intraday_pnl", sa.Float(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_daily_pnl"),
        sa.UniqueConstraint("run_id", "date", name="uq_daily_pnl_run_id_date"),
    )
    op.create_index("ix_daily_pnl_run_id", "daily_pnl", ["run_id"])

    op.create_table(
        "strategy_parameters",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _run_id("strategy_parameters"),
        sa.Column("parameter_name", sa.String(length=255), nullable=False),
        sa.Column("parameter_value", sa.Text(), nullable=False),
        sa.Column("parameter_type", _parameter_type, nullable=False),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_strategy_parameters"),
    )
    op.create_index("ix_strategy_parameters_run_id", "strategy_parameters", ["run_id"])

    op.create_table(
        "strategy_metrics",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _run_id("strategy_metrics"),
        sa.Column("metric_name", sa.String(length=255), nullable=False),
        sa.Column("metric_value", sa.Float(), nullable=False),
        sa.Column("metric_description", sa.Text(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_strategy_metrics"),
    )
    op.create_index("ix_strategy_metrics_run_id", "strategy_metrics", ["run_id"])

    op.create_table(
        "strategy_events",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _run_id("strategy_events"),
        sa.Column("event_type", _event_type, nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.String(length=16), nullable=False),
        sa.Column("trade_id", sa.String(length=64), nullable=True),
        sa.Column("direction", sa.String(length=16), nullable=True),
        sa.Column("target", sa.String(length=64), nullable=True),
        sa.Column("closest_distance", sa.String(length=64), nullable=True),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("trigger", sa.String(length=255), nullable=True),
        sa.Column("adjustment", sa.String(length=255), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_strategy_events"),
    )
    op.create_index("ix_strategy_events_run_id", "strategy_events", ["run_id"])

    op.create_table(
        "strategy_trade_summaries",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        _run_id("strategy_trade_summaries"),
        sa.Column("trade_id", sa.String(length=64), nullable=False),
        sa.Column("date", sa.Date(), nullable=False),
        sa.Column("time", sa.String(length=16), nullable=False),
        sa.Column("direction", sa.String(length=16), nullable=False),
        sa.Column("line", sa.String(length=64), nullable=False),
        sa.Column("entry_price", sa.Float(), nullable=False),
        sa.Column("high_price", sa.Float(), nullable=False),
        sa.Column("low_price", sa.Float(), nullable=False),
        sa.Column("max_profit", sa.Float(), nullable=False),
        sa.Column("max_loss", sa.Float(), nullable=False),
        sa.Column("actual_pnl", sa.Float(), nullable=False),
        sa.Column("bars", sa.Integer(), nullable=False),
        sa.Column("max_profit_vs_target", sa.Float(), nullable=True),
        sa.Column("max_loss_vs_stop", sa.Float(), nullable=True),
        sa.Column("profit_efficiency", sa.Float(), nullable=True),
        _created_at(),
        sa.PrimaryKeyConstraint("id", name="pk_strategy_trade_summaries"),
    )
    op.create_index(
        "ix_strategy_trade_summaries_run_id", "strategy_trade_summaries", ["run_id"]
    )


def downgrade() -> None:
    op.drop_index("ix_strategy_trade_summaries_run_id", table_name="strategy_trade_summaries")
    op.drop_table("strategy_trade_summaries")
    op.drop_index("ix_strategy_events_run_id", table_name="strategy_events")
    op.drop_table("strategy_events")
    op.drop_index("ix_strategy_metrics_run_id", table_name="strategy_metrics")
    op.drop_table("strategy_metrics")
    op.drop_index("ix_strategy_parameters_run_id", table_name="strategy_parameters")
    op.drop_table("strategy_parameters")
    op.drop_index("ix_daily_pnl_run_id", table_name="daily_pnl")
    op.drop_table("daily_pnl")
    op.drop_index("uq_strategy_runs_baseline", table_name="strategy_runs")
    op.drop_index("ix_strategy_runs_created_at", table_name="strategy_runs")
    op.drop_index("ix_strategy_runs_strategy_id", table_name="strategy_runs")
    op.drop_table("strategy_runs")
    op.drop_table("strategies")
