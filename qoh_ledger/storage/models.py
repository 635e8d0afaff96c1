from datetime import date, datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, Boolean, Date, DateTime, ForeignKey, Integer, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from qoh_ledger.storage.database import Base

Money = Numeric(12, 2)
Percent = Numeric(5, 2)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ConfigurationRecord(Base):
    __tablename__ = "configurations"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    organization_id: Mapped[str] = mapped_column(String(64), nullable=False, unique=True, index=True)
    ticket_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    organization_percentage: Mapped[Decimal] = mapped_column(Percent, nullable=False)
    jackpot_percentage: Mapped[Decimal] = mapped_column(Percent, nullable=False)
    penalty_percentage: Mapped[Decimal] = mapped_column(Percent, nullable=False)
    minimum_starting_jackpot: Mapped[Decimal] = mapped_column(Money, nullable=False)
    minimum_payout_guarantee: Mapped[Decimal] = mapped_column(Money, nullable=False)
    card_payouts: Mapped[dict] = mapped_column(JSON, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow, onupdate=_utcnow)


class Game(Base):
    __tablename__ = "games"
    __table_args__ = (UniqueConstraint("organization_id", "game_number", name="uq_games_org_number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    organization_id: Mapped[str] = mapped_column(String(64), nullable=False, index=True)
    game_number: Mapped[int] = mapped_column(Integer, nullable=False)
    name: Mapped[str] = mapped_column(String(128), nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date, nullable=True, index=True)

    ticket_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    organization_percentage: Mapped[Decimal] = mapped_column(Percent, nullable=False)
    jackpot_percentage: Mapped[Decimal] = mapped_column(Percent, nullable=False)
    penalty_percentage: Mapped[Decimal] = mapped_column(Percent, nullable=False)
    minimum_starting_jackpot: Mapped[Decimal] = mapped_column(Money, nullable=False)
    minimum_payout_guarantee: Mapped[Decimal] = mapped_column(Money, nullable=False)
    card_payouts: Mapped[dict] = mapped_column(JSON, nullable=False)

    carryover_jackpot: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    total_sales: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    total_payouts: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    total_expenses: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    total_donations: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    organization_total: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    total_jackpot_contributions: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    weekly_payouts_distributed: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    final_jackpot_payout: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    jackpot_shortfall_covered: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    organization_net_profit: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    game_duration_weeks: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    jackpot_contribution_to_next_game: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))

    carryover_credited: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    successor_seeded: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, default=_utcnow)

    weeks: Mapped[list["Week"]] = relationship(back_populates="game", cascade="all, delete-orphan")
    entries: Mapped[list["TicketSale"]] = relationship(back_populates="game", cascade="all, delete-orphan")
    expenses: Mapped[list["Expense"]] = relationship(back_populates="game", cascade="all, delete-orphan")


class Week(Base):
    __tablename__ = "weeks"
    __table_args__ = (UniqueConstraint("game_id", "week_number", name="uq_weeks_game_number"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    week_number: Mapped[int] = mapped_column(Integer, nullable=False)
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)
    weekly_tickets_sold: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    weekly_sales: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    weekly_payout: Mapped[Decimal] = mapped_column(Money, nullable=False, default=Decimal("0"))
    ending_jackpot: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    jackpot_at_draw: Mapped[Decimal | None] = mapped_column(Money, nullable=True)
    winner_name: Mapped[str | None] = mapped_column(String(128), nullable=True)
    card_selected: Mapped[str | None] = mapped_column(String(64), nullable=True)
    winner_present: Mapped[bool | None] = mapped_column(Boolean, nullable=True)
    slot_chosen: Mapped[int | None] = mapped_column(Integer, nullable=True)
    authorized_signature_name: Mapped[str | None] = mapped_column(String(128), nullable=True)

    game: Mapped[Game] = relationship(back_populates="weeks")
    entries: Mapped[list["TicketSale"]] = relationship(back_populates="week", cascade="all, delete-orphan")


class TicketSale(Base):
    __tablename__ = "ticket_sales"
    __table_args__ = (UniqueConstraint("game_id", "date", name="uq_ticket_sales_game_date"),)

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    week_id: Mapped[int] = mapped_column(ForeignKey("weeks.id"), nullable=False, index=True)
    date: Mapped[date] = mapped_column(Date, nullable=False, index=True)
    tickets_sold: Mapped[int] = mapped_column(Integer, nullable=False)
    ticket_price: Mapped[Decimal] = mapped_column(Money, nullable=False)
    amount_collected: Mapped[Decimal] = mapped_column(Money, nullable=False)
    organization_total: Mapped[Decimal] = mapped_column(Money, nullable=False)
    jackpot_total: Mapped[Decimal] = mapped_column(Money, nullable=False)
    cumulative_collected: Mapped[Decimal] = mapped_column(Money, nullable=False)
    jackpot_contributions_total: Mapped[Decimal] = mapped_column(Money, nullable=False)
    ending_jackpot_total: Mapped[Decimal | None] = mapped_column(Money, nullable=True)

    game: Mapped[Game] = relationship(back_populates="entries")
    week: Mapped[Week] = relationship(back_populates="entries")


class Expense(Base):
    __tablename__ = "expenses"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    game_id: Mapped[int] = mapped_column(ForeignKey("games.id"), nullable=False, index=True)
    date: Mapped[date] = mapped_column(Date, nullable=False)
    amount: Mapped[Decimal] = mapped_column(Money, nullable=False)
    is_donation: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    memo: Mapped[str] = mapped_column(String(255), nullable=False, default="")

    game: Mapped[Game] = relationship(back_populates="expenses")
