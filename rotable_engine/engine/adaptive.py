"""
Adaptive feedback controller.

Consumes the penalty stream of the live simulation and turns it into small,
bounded corrections of the operating parameters:

- per-airport risk scores (overflow raises risk, unfulfilled demand lowers
  it, every update decays it) that tighten destination buffers
- per-class penalty cost accumulators and daily snapshots
- a once-per-day economy load-factor adjustment, capped cumulatively

Global strategy-mode switching is available behind ``mode_switching_enabled``
and is off by default; adaptation is then per-airport only.
"""

import logging
from collections import deque
from dataclasses import asdict, dataclass
from enum import Enum
from typing import Any, Deque, Dict, Iterable, List, Mapping, Optional, Union

from ..config import EngineSettings
from ..logger import JSONLogger
from ..models.characteristics import DatasetCharacteristics, EconomyLoadFactorConfig
from ..models.flight import ReferenceHour
from ..models.kit import KIT_CLASSES, ClassKey, KitClass
from ..models.penalty import PenaltyEvent, PenaltyType
from ..utils import clamp, format_cost

logger = logging.getLogger(__name__)

RISK_DEFAULT = 0.5
RISK_OVERFLOW_STEP = 0.1
RISK_UNFULFILLED_STEP = 0.02
RISK_FLOOR = 0.1
RISK_CEILING = 1.0
RISK_DECAY = 0.99
HIGH_RISK = 0.7
HIGH_RISK_BUFFER_PENALTY = 0.1

BUFFER_BOUNDS = (0.50, 0.95)

HOT_AIRPORT_RECENT_DAYS = 2
HOT_AIRPORT_MIN_OVERFLOWS = 3

# Overflow rate multiple (of the "low" threshold) that triggers a decrease
HIGH_OVERFLOW_MULTIPLE = 5

MODE_SWITCH_MIN_ROUNDS = 24
MODE_SWITCH_HALF_WINDOW = 12
SUMMARY_RECENT_ROUNDS = 6


class StrategyMode(str, Enum):
    AGGRESSIVE = "aggressive"
    BALANCED = "balanced"
    CONSERVATIVE = "conservative"


@dataclass
class AirportPerformance:
    """Overflow/unfulfilled history of one airport."""

    overflow_count: int = 0
    unfulfilled_count: int = 0
    last_overflow_day: int = -1
    risk_score: float = RISK_DEFAULT  # 0-1, higher = more overflow risk


@dataclass
class ClassPenaltyStats:
    unfulfilled_count: int = 0
    unfulfilled_cost: float = 0.0
    overflow_count: int = 0
    overflow_cost: float = 0.0


@dataclass
class DailySnapshot:
    day: int
    economy_unfulfilled: float
    total_overflow: float


PenaltyInput = Union[PenaltyEvent, Mapping[str, Any]]


class AdaptiveEngine:
    """
    Single feedback controller for buffers and the economy load factor.

    One instance per simulation run; a reset is constructing a new one.
    Calls must be serialized by the driver loop.
    """

    def __init__(
        self,
        characteristics: Optional[DatasetCharacteristics] = None,
        mode_switching_enabled: bool = False,
        settings: Optional[EngineSettings] = None,
        journal: Optional[JSONLogger] = None,
    ):
        self.characteristics = characteristics
        self.mode_switching_enabled = mode_switching_enabled
        self.settings = settings or EngineSettings()
        self.journal = journal

        window = self.settings.HISTORY_WINDOW_HOURS
        self._penalty_history: Deque[PenaltyEvent] = deque()
        # One entry per round (hour); kept for trend inspection and mode switching
        self._round_penalties: Deque[float] = deque(maxlen=window)

        self._strategy_mode = StrategyMode.BALANCED
        self._buffer_multiplier = 1.0
        self._economy_buffer_boost = 0.0

        self._airport_performance: Dict[str, AirportPerformance] = {}
        self._class_penalty_stats: Dict[KitClass, ClassPenaltyStats] = {
            kit_class: ClassPenaltyStats() for kit_class in KIT_CLASSES
        }
        self._daily_snapshots: List[DailySnapshot] = []

        self._load_factor_adjustments: Dict[KitClass, float] = {
            kit_class: 0.0 for kit_class in KIT_CLASSES
        }
        self._last_adjustment_day = -1

    # ==================== INGESTION ====================

    def record_penalties(self, penalties: Iterable[PenaltyInput], day: int, hour: int) -> None:
        """
        Record the penalties reported for one round.

        Accepts structured PenaltyEvent objects, or raw platform dicts
        ({code, penalty, reason}) whose reason text is parsed for airport and
        class. Events without an airport or class skip that attribution only.
        """
        round_total = 0.0

        for raw in penalties:
            event = raw if isinstance(raw, PenaltyEvent) else PenaltyEvent.from_raw(raw, day, hour)
            round_total += event.amount
            self._penalty_history.append(event)

            if event.airport_code:
                self._update_airport_performance(event)
            self._update_class_penalty_stats(event)

        self._round_penalties.append(round_total)
        self._trim_history(day, hour)

        if hour == 0 and day > 0:
            self._take_daily_snapshot(day - 1)

        self._analyze_and_adapt(day, hour)

    def _trim_history(self, day: int, hour: int) -> None:
        oldest = ReferenceHour(day=day, hour=hour).to_hours() - self.settings.HISTORY_WINDOW_HOURS
        while self._penalty_history and self._penalty_history[0].occurred_at.to_hours() <= oldest:
            self._penalty_history.popleft()

    def _update_class_penalty_stats(self, event: PenaltyEvent) -> None:
        if event.kit_class is None:
            return

        stats = self._class_penalty_stats[event.kit_class]
        if event.penalty_type is PenaltyType.FLIGHT_UNFULFILLED:
            stats.unfulfilled_count += 1
            stats.unfulfilled_cost += event.amount
        elif event.penalty_type is PenaltyType.INVENTORY_EXCEEDS_CAPACITY:
            stats.overflow_count += 1
            stats.overflow_cost += event.amount

    def _update_airport_performance(self, event: PenaltyEvent) -> None:
        perf = self._airport_performance.setdefault(event.airport_code, AirportPerformance())

        if event.penalty_type is PenaltyType.INVENTORY_EXCEEDS_CAPACITY:
            perf.overflow_count += 1
            perf.last_overflow_day = event.day
            perf.risk_score = min(RISK_CEILING, perf.risk_score + RISK_OVERFLOW_STEP)
        elif event.penalty_type is PenaltyType.FLIGHT_UNFULFILLED:
            # Under-delivery: the airport is protected too conservatively
            perf.unfulfilled_count += 1
            perf.risk_score = max(RISK_FLOOR, perf.risk_score - RISK_UNFULFILLED_STEP)

        perf.risk_score *= RISK_DECAY

    def _take_daily_snapshot(self, day: int) -> None:
        snapshot = DailySnapshot(
            day=day,
            economy_unfulfilled=self.get_economy_unfulfilled_cost(),
            total_overflow=self.get_total_overflow_cost(),
        )
        self._daily_snapshots.append(snapshot)

        logger.debug(
            f"Day {day} snapshot: economy unfulfilled {format_cost(snapshot.economy_unfulfilled)}, "
            f"overflow {format_cost(snapshot.total_overflow)}"
        )
        if self.journal is not None:
            self.journal.log_event("daily_snapshot", day, asdict(snapshot))

    def _analyze_and_adapt(self, current_day: int, current_hour: int) -> None:
        """Global mode switching from the recent penalty trend (opt-in)."""
        if not self.mode_switching_enabled:
            return
        if len(self._round_penalties) < MODE_SWITCH_MIN_ROUNDS:
            return

        rounds = list(self._round_penalties)
        recent = rounds[-MODE_SWITCH_HALF_WINDOW:]
        older = rounds[-2 * MODE_SWITCH_HALF_WINDOW:-MODE_SWITCH_HALF_WINDOW]
        recent_avg = _average(recent)
        older_avg = _average(older) if older else recent_avg

        previous_mode = self._strategy_mode
        if recent_avg > older_avg * 1.5:
            self._strategy_mode = StrategyMode.CONSERVATIVE
            self._buffer_multiplier = min(1.15, self._buffer_multiplier + 0.02)
        elif recent_avg < older_avg * 0.5 and self._strategy_mode is not StrategyMode.AGGRESSIVE:
            self._strategy_mode = StrategyMode.AGGRESSIVE
            self._buffer_multiplier = max(0.95, self._buffer_multiplier - 0.01)
        else:
            self._strategy_mode = StrategyMode.BALANCED
            self._buffer_multiplier = self._buffer_multiplier * 0.95 + 1.0 * 0.05

        if previous_mode is not self._strategy_mode:
            logger.info(
                f"Day {current_day} hour {current_hour}: strategy mode "
                f"{previous_mode.value} -> {self._strategy_mode.value}"
            )

    # ==================== BUFFERS & RISK ====================

    def get_buffer_percent(self, destination_airport: str, kit_class: ClassKey, base_buffer: float) -> float:
        """Destination buffer after global, economy and per-airport risk adjustments."""
        buffer = base_buffer * self._buffer_multiplier

        if KitClass(kit_class) is KitClass.ECONOMY:
            buffer -= self._economy_buffer_boost

        perf = self._airport_performance.get(destination_airport)
        if perf is not None and perf.risk_score > HIGH_RISK:
            buffer -= (perf.risk_score - HIGH_RISK) * HIGH_RISK_BUFFER_PENALTY

        return clamp(buffer, *BUFFER_BOUNDS)

    def get_airport_risk_score(self, airport_code: str) -> float:
        perf = self._airport_performance.get(airport_code)
        return perf.risk_score if perf is not None else RISK_DEFAULT

    def get_airport_performance(self, airport_code: str) -> Optional[AirportPerformance]:
        return self._airport_performance.get(airport_code)

    def is_hot_airport(self, airport_code: str, current_day: int) -> bool:
        """Overflowed within the last two days and more than three times overall."""
        perf = self._airport_performance.get(airport_code)
        if perf is None:
            return False
        return (
            perf.last_overflow_day >= current_day - HOT_AIRPORT_RECENT_DAYS
            and perf.overflow_count > HOT_AIRPORT_MIN_OVERFLOWS
        )

    def get_prioritized_classes(self) -> List[KitClass]:
        """Classes in loading priority order, most expensive kit first."""
        return list(KIT_CLASSES)

    def get_purchase_multiplier(self, kit_class: ClassKey) -> float:
        # Unfulfilled demand happens at spokes; buying more only fills the hub
        return 1.0

    # ==================== LOAD FACTOR ====================

    def suggest_load_factor_adjustment(
        self,
        current_day: int,
        unfulfilled_cost: Optional[float] = None,
        overflow_cost: Optional[float] = None,
    ) -> float:
        """
        Daily economy load-factor control step; returns the cumulative adjustment.

        Penalty totals default to this engine's own accumulators; callers
        holding another source may pass cumulative totals explicitly.
        Evaluated at most once per day, never before the warm-up period, and
        the cumulative value is kept within +/- MAX_TOTAL_ADJUSTMENT.
        """
        current = self._load_factor_adjustments[KitClass.ECONOMY]

        if current_day < self.settings.WARMUP_DAYS:
            return current
        if current_day == self._last_adjustment_day:
            return current
        self._last_adjustment_day = current_day

        if unfulfilled_cost is None:
            unfulfilled_cost = self.get_economy_unfulfilled_cost()
        if overflow_cost is None:
            overflow_cost = self.get_total_overflow_cost()

        unfulfilled_rate = unfulfilled_cost / current_day
        overflow_rate = overflow_cost / current_day

        step = self.settings.MAX_DAILY_ADJUSTMENT
        low_overflow = self.settings.OVERFLOW_RATE_THRESHOLD

        adjustment = 0.0
        if unfulfilled_rate > self.settings.UNFULFILLED_RATE_THRESHOLD and overflow_rate < low_overflow:
            adjustment = step
        elif overflow_rate > low_overflow * HIGH_OVERFLOW_MULTIPLE:
            adjustment = -step

        limit = self.settings.MAX_TOTAL_ADJUSTMENT
        updated = clamp(current + adjustment, -limit, limit)

        if updated != current:
            self._load_factor_adjustments[KitClass.ECONOMY] = updated
            logger.info(
                f"Day {current_day}: economy unfulfilled {format_cost(unfulfilled_rate)}/day, "
                f"overflow {format_cost(overflow_rate)}/day => load factor adjustment "
                f"{current:+.2f} -> {updated:+.2f}"
            )
            if self.journal is not None:
                self.journal.log_event(
                    "load_factor_adjustment",
                    current_day,
                    {
                        "previous": current,
                        "updated": updated,
                        "unfulfilled_rate": unfulfilled_rate,
                        "overflow_rate": overflow_rate,
                    },
                )

        return updated

    def get_load_factor_adjustment(self, kit_class: ClassKey) -> float:
        return self._load_factor_adjustments[KitClass(kit_class)]

    def get_effective_economy_load_factor(
        self, policy: Optional[EconomyLoadFactorConfig] = None
    ) -> float:
        """Calibrated baseline plus the current adjustment, within the policy bounds."""
        if policy is None:
            if self.characteristics is None:
                raise ValueError("No load-factor policy: pass one or construct with characteristics")
            policy = self.characteristics.economy_load_factor

        return clamp(
            policy.baseline + self._load_factor_adjustments[KitClass.ECONOMY],
            policy.min_factor,
            policy.max_factor,
        )

    # ==================== ACCESSORS ====================

    def get_class_penalty_stats(self) -> Dict[KitClass, ClassPenaltyStats]:
        return self._class_penalty_stats

    def get_economy_unfulfilled_cost(self) -> float:
        return self._class_penalty_stats[KitClass.ECONOMY].unfulfilled_cost

    def get_total_overflow_cost(self) -> float:
        return sum(stats.overflow_cost for stats in self._class_penalty_stats.values())

    def get_daily_snapshots(self) -> List[DailySnapshot]:
        return list(self._daily_snapshots)

    def get_penalty_history(self) -> List[PenaltyEvent]:
        return list(self._penalty_history)

    def get_strategy_mode(self) -> StrategyMode:
        return self._strategy_mode

    def get_buffer_multiplier(self) -> float:
        return self._buffer_multiplier

    def get_summary(self) -> Dict[str, Any]:
        """Snapshot for logging and the dashboard."""
        hot_airports = [
            code for code, perf in self._airport_performance.items() if perf.risk_score > HIGH_RISK
        ]
        recent = list(self._round_penalties)[-SUMMARY_RECENT_ROUNDS:]

        return {
            "mode": self._strategy_mode.value,
            "mode_switching_enabled": self.mode_switching_enabled,
            "buffer_multiplier": self._buffer_multiplier,
            "economy_boost": self._economy_buffer_boost,
            "hot_airports": hot_airports,
            "recent_penalty_avg": _average(recent),
            "economy_unfulfilled_cost": self.get_economy_unfulfilled_cost(),
            "total_overflow_cost": self.get_total_overflow_cost(),
            "economy_load_factor_adjustment": self._load_factor_adjustments[KitClass.ECONOMY],
        }


def _average(values: List[float]) -> float:
    if not values:
        return 0.0
    return sum(values) / len(values)
