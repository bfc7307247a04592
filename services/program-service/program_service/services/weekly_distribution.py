from __future__ import annotations

from dataclasses import dataclass

import structlog

from ..schemas import STRENGTH_PATTERNS, DayFocus, MovementPattern

logger = structlog.get_logger(__name__)

P = MovementPattern


@dataclass(frozen=True)
class DayTemplate:
    primary: tuple[MovementPattern, ...]
    secondary: tuple[MovementPattern, ...]
    focus: DayFocus


@dataclass(frozen=True)
class DayPlan:
    index: int
    primary_patterns: tuple[MovementPattern, ...]
    secondary_patterns: tuple[MovementPattern, ...]
    fallback_patterns: tuple[MovementPattern, ...]
    focus: DayFocus

    @property
    def patterns(self) -> tuple[MovementPattern, ...]:
        return self.primary_patterns + self.secondary_patterns

    @property
    def tiers(self) -> tuple[tuple[MovementPattern, ...], ...]:
        return (self.primary_patterns, self.secondary_patterns, self.fallback_patterns)


# 3 days: full body. 4 days: upper/lower. 5 days: one main pattern per day.
WEEKLY_TEMPLATES: dict[int, tuple[DayTemplate, ...]] = {
    3: (
        DayTemplate((P.squat, P.horizontal_push), (P.horizontal_pull, P.core), DayFocus.squat),
        DayTemplate((P.hinge, P.vertical_pull), (P.vertical_push, P.carry), DayFocus.hinge),
        DayTemplate((P.lunge, P.horizontal_push), (P.horizontal_pull, P.rotation), DayFocus.athletic),
    ),
    4: (
        DayTemplate((P.squat,), (P.lunge, P.core), DayFocus.squat),
        DayTemplate((P.horizontal_push, P.horizontal_pull), (P.vertical_push, P.rotation), DayFocus.upper_push),
        DayTemplate((P.hinge,), (P.lunge, P.carry), DayFocus.hinge),
        DayTemplate((P.vertical_pull, P.vertical_push), (P.horizontal_pull, P.core), DayFocus.upper_pull),
    ),
    5: (
        DayTemplate((P.squat,), (P.core, P.lunge), DayFocus.squat),
        DayTemplate((P.horizontal_push,), (P.vertical_push, P.rotation), DayFocus.upper_push),
        DayTemplate((P.hinge,), (P.carry, P.lunge), DayFocus.hinge),
        DayTemplate((P.vertical_pull,), (P.horizontal_pull, P.core), DayFocus.upper_pull),
        DayTemplate((P.lunge,), (P.vertical_push, P.rotation), DayFocus.unilateral),
    ),
}

DEFAULT_FREQUENCY = 3

SPLIT_NAMES: dict[int, str] = {
    3: "full_body",
    4: "upper_lower",
    5: "pattern_split",
}


def normalize_frequency(days_per_week: int) -> int:
    if days_per_week in WEEKLY_TEMPLATES:
        return days_per_week
    logger.warning("unsupported_weekly_frequency", requested=days_per_week, using=DEFAULT_FREQUENCY)
    return DEFAULT_FREQUENCY


def plan_day(frequency: int, day_index: int) -> DayPlan:
    template = WEEKLY_TEMPLATES[normalize_frequency(frequency)][day_index - 1]
    used = set(template.primary) | set(template.secondary)
    return DayPlan(
        index=day_index,
        primary_patterns=template.primary,
        secondary_patterns=template.secondary,
        fallback_patterns=tuple(pattern for pattern in STRENGTH_PATTERNS if pattern not in used),
        focus=template.focus,
    )


def plan_week(frequency: int) -> list[DayPlan]:
    frequency = normalize_frequency(frequency)
    return [plan_day(frequency, day_index) for day_index in range(1, frequency + 1)]
