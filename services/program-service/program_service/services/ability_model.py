from __future__ import annotations

from dataclasses import dataclass

import structlog

from ..schemas import (
    DIFFICULTY_ORDER,
    Assessment,
    Difficulty,
    Exercise,
    MovementPattern,
    UserProfile,
    difficulty_rank,
)

logger = structlog.get_logger(__name__)

# (assessment field, intermediate from, advanced from); more is better.
REP_THRESHOLDS: dict[MovementPattern, tuple[str, float, float]] = {
    MovementPattern.horizontal_push: ("pushups", 10, 25),
    MovementPattern.vertical_push: ("pike_pushups", 5, 15),
    MovementPattern.horizontal_pull: ("pullups", 3, 10),
    MovementPattern.vertical_pull: ("pullups", 3, 10),
    MovementPattern.squat: ("squats", 20, 40),
    MovementPattern.lunge: ("walking_lunges", 12, 24),
    MovementPattern.hinge: ("single_leg_rdl", 8, 15),
    MovementPattern.core: ("plank_hold", 30, 90),
    MovementPattern.rotation: ("plank_hold", 45, 120),
}

# 1RM divided by body weight.
STRENGTH_RATIO_THRESHOLDS: dict[MovementPattern, tuple[str, float, float]] = {
    MovementPattern.squat: ("squat_1rm", 1.0, 1.75),
    MovementPattern.hinge: ("deadlift_1rm", 1.25, 2.0),
    MovementPattern.horizontal_push: ("bench_press_1rm", 0.75, 1.25),
    MovementPattern.vertical_push: ("overhead_press_1rm", 0.5, 0.75),
    MovementPattern.horizontal_pull: ("barbell_row_1rm", 0.6, 1.0),
    MovementPattern.lunge: ("dumbbell_lunge_1rm", 0.3, 0.5),
    MovementPattern.carry: ("farmers_carry_1rm", 0.5, 1.0),
}

# Mile time in minutes; less is better.
MILE_TIME_BEGINNER_ABOVE = 12.0
MILE_TIME_ADVANCED_BELOW = 8.0

OVERRIDE_FIELDS: dict[MovementPattern, str] = {
    MovementPattern.horizontal_push: "horizontal_push_override",
    MovementPattern.vertical_push: "vertical_push_override",
    MovementPattern.horizontal_pull: "horizontal_pull_override",
    MovementPattern.vertical_pull: "vertical_pull_override",
    MovementPattern.squat: "lower_body_override",
    MovementPattern.lunge: "lower_body_override",
    MovementPattern.hinge: "hinge_override",
    MovementPattern.core: "core_override",
    MovementPattern.rotation: "rotation_override",
    MovementPattern.carry: "carry_override",
    MovementPattern.cardio: "cardio_override",
}


@dataclass(frozen=True)
class AbilityModel:
    """Difficulty ceiling per movement pattern for one request."""

    ceilings: dict[MovementPattern, Difficulty]
    experience: Difficulty

    def ceiling(self, pattern: MovementPattern) -> Difficulty:
        return self.ceilings.get(pattern, self.experience)

    def allowed(self, pattern: MovementPattern) -> frozenset[Difficulty]:
        rank = difficulty_rank(self.ceiling(pattern))
        return frozenset(DIFFICULTY_ORDER[: rank + 1])

    def allows(self, exercise: Exercise, stretch: int = 0) -> bool:
        """True when the exercise is at most `stretch` tiers above the pattern ceiling."""
        ceiling = difficulty_rank(self.ceiling(exercise.movement_pattern))
        return difficulty_rank(exercise.difficulty) <= ceiling + stretch


def tier_from_score(value: float, intermediate_from: float, advanced_from: float) -> Difficulty:
    if value >= advanced_from:
        return Difficulty.advanced
    if value >= intermediate_from:
        return Difficulty.intermediate
    return Difficulty.beginner


def tier_from_mile_time(minutes: float) -> Difficulty:
    if minutes > MILE_TIME_BEGINNER_ABOVE:
        return Difficulty.beginner
    if minutes < MILE_TIME_ADVANCED_BELOW:
        return Difficulty.advanced
    return Difficulty.intermediate


def declared_experience(profile: UserProfile, assessment: Assessment | None) -> Difficulty:
    if assessment is not None and assessment.experience_level is not None:
        return Difficulty(assessment.experience_level.value)
    return Difficulty(profile.experience_level.value)


def _pattern_tier(
    pattern: MovementPattern,
    assessment: Assessment | None,
    body_weight: float | None,
    fallback: Difficulty,
) -> Difficulty:
    if assessment is None:
        return fallback

    override = getattr(assessment, OVERRIDE_FIELDS[pattern])
    if override is not None:
        return Difficulty(override)

    signals: list[Difficulty] = []

    rep_rule = REP_THRESHOLDS.get(pattern)
    if rep_rule is not None:
        field_name, intermediate_from, advanced_from = rep_rule
        value = getattr(assessment, field_name)
        if value is not None:
            signals.append(tier_from_score(value, intermediate_from, advanced_from))

    ratio_rule = STRENGTH_RATIO_THRESHOLDS.get(pattern)
    if ratio_rule is not None and body_weight:
        field_name, intermediate_from, advanced_from = ratio_rule
        one_rm = getattr(assessment, field_name)
        if one_rm:
            signals.append(tier_from_score(one_rm / body_weight, intermediate_from, advanced_from))

    if pattern is MovementPattern.cardio and assessment.mile_time is not None:
        signals.append(tier_from_mile_time(assessment.mile_time))

    if not signals:
        return fallback
    return max(signals, key=difficulty_rank)


def build_ability_model(profile: UserProfile, assessment: Assessment | None = None) -> AbilityModel:
    experience = declared_experience(profile, assessment)
    ceilings = {
        pattern: _pattern_tier(pattern, assessment, profile.body_weight, experience)
        for pattern in MovementPattern
    }
    logger.debug(
        "ability_model_built",
        experience=experience.value,
        ceilings={pattern.value: tier.value for pattern, tier in ceilings.items()},
    )
    return AbilityModel(ceilings=ceilings, experience=experience)
