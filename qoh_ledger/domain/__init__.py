from .aggregation import (
    ExpenseRecord,
    GameTotals,
    WeekTotals,
    calculation_warnings,
    game_totals,
    verify_running_totals,
    verify_week_totals,
    week_totals,
)
from .calendar import ensure_no_overlap, find_week_for_date, week_end
from .config import DEFAULT_CONFIGURATION, JACKPOT, Configuration
from .distribution import WinnerDistribution, distribute_jackpot, normalize_winner
from .errors import (
    ActiveGameExistsError,
    ConsistencyViolationError,
    DomainValidationError,
    DuplicateGameNumberError,
    GameClosedError,
    InvalidDateRangeError,
    InvalidInputError,
    InvalidJackpotAmountError,
    MissingWinnerInfoError,
    RecordNotFoundError,
)
from .jackpot import JackpotWeekRow, current_jackpot, displayed_jackpot, ending_after_payout, jackpot_breakdown
from .ledger import LedgerEntry, SaleSplit, build_entry, changed_entries, recompute_from, split_sale
from .week import LedgerWeek, WeekState

__all__ = [
    "ActiveGameExistsError",
    "Configuration",
    "ConsistencyViolationError",
    "DEFAULT_CONFIGURATION",
    "DomainValidationError",
    "DuplicateGameNumberError",
    "ExpenseRecord",
    "GameClosedError",
    "GameTotals",
    "InvalidDateRangeError",
    "InvalidInputError",
    "InvalidJackpotAmountError",
    "JACKPOT",
    "JackpotWeekRow",
    "LedgerEntry",
    "LedgerWeek",
    "MissingWinnerInfoError",
    "RecordNotFoundError",
    "SaleSplit",
    "WeekState",
    "WeekTotals",
    "WinnerDistribution",
    "build_entry",
    "calculation_warnings",
    "changed_entries",
    "current_jackpot",
    "displayed_jackpot",
    "distribute_jackpot",
    "ending_after_payout",
    "ensure_no_overlap",
    "find_week_for_date",
    "game_totals",
    "jackpot_breakdown",
    "normalize_winner",
    "recompute_from",
    "split_sale",
    "verify_running_totals",
    "verify_week_totals",
    "week_end",
    "week_totals",
]
