"""Session time math.

Every minute estimate in the service goes through `estimate_minutes`, so
the counts planned up front and the budget check after assembly agree.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass

import structlog

from ..schemas import STRENGTH_ROLES, CardioType, Difficulty, ExerciseRole, GeneratedExercise, NutritionGoal
from .prescription import Prescription, cardio_prescription, role_prescription
from .template_selector import ProgramTemplate

logger = structlog.get_logger(__name__)

SESSION_BUCKETS: tuple[int, ...] = (30, 45, 60)
SECONDS_PER_REP = 2.5
TRANSITION_MINUTES = 1.0
WARMUP_MINUTES = 0.5

MAX_PRIMARY = 2
MAX_POWER = 2
SECONDARY_SHARE = 0.3
ISOLATION_SHARE = 0.5


@dataclass(frozen=True)
class TimeSplit:
    """Percent of the session per block."""

    warmup: int
    power: int
    strength: int
    cardio: int


TIME_SPLITS: dict[NutritionGoal, dict[int, TimeSplit]] = {
    NutritionGoal.gain: {
        30: TimeSplit(warmup=5, power=0, strength=85, cardio=10),
        45: TimeSplit(warmup=5, power=10, strength=75, cardio=10),
        60: TimeSplit(warmup=5, power=10, strength=75, cardio=10),
    },
    NutritionGoal.maintain: {
        30: TimeSplit(warmup=5, power=0, strength=75, cardio=20),
        45: TimeSplit(warmup=5, power=5, strength=70, cardio=20),
        60: TimeSplit(warmup=5, power=10, strength=65, cardio=20),
    },
    NutritionGoal.lose: {
        30: TimeSplit(warmup=5, power=0, strength=55, cardio=40),
        45: TimeSplit(warmup=5, power=5, strength=50, cardio=40),
        60: TimeSplit(warmup=5, power=5, strength=50, cardio=40),
    },
}


@dataclass(frozen=True)
class MinuteBudget:
    session_minutes: int
    bucket: int
    warmup: float
    power: float
    strength: float
    cardio: float


@dataclass(frozen=True)
class ExerciseCounts:
    warmup: int
    power: int
    primary: int
    secondary: int
    isolation: int
    cardio: int

    @property
    def compound(self) -> int:
        return self.primary + self.secondary


def session_bucket(session_minutes: int) -> int:
    bucket = SESSION_BUCKETS[0]
    for threshold in SESSION_BUCKETS:
        if session_minutes >= threshold:
            bucket = threshold
    return bucket


def allocate_minutes(goal: NutritionGoal, session_minutes: int) -> MinuteBudget:
    bucket = session_bucket(session_minutes)
    split = TIME_SPLITS[NutritionGoal(goal)][bucket]
    return MinuteBudget(
        session_minutes=session_minutes,
        bucket=bucket,
        warmup=split.warmup * session_minutes / 100,
        power=split.power * session_minutes / 100,
        strength=split.strength * session_minutes / 100,
        cardio=split.cardio * session_minutes / 100,
    )


def estimate_minutes(
    sets: int,
    reps_min: int | None = None,
    reps_max: int | None = None,
    duration_seconds: int | None = None,
    work_seconds: int | None = None,
    rest_seconds: int = 0,
) -> float:
    rest = rest_seconds * max(sets - 1, 0) / 60
    if duration_seconds:
        return duration_seconds * sets / 60 + rest
    if work_seconds:
        return work_seconds * sets / 60 + rest
    if reps_min is not None:
        average_reps = (reps_min + (reps_max if reps_max is not None else reps_min)) / 2
        return average_reps * SECONDS_PER_REP * sets / 60 + rest
    return rest


def prescription_minutes(prescription: Prescription) -> float:
    return (
        estimate_minutes(
            prescription.sets,
            prescription.reps_min,
            prescription.reps_max,
            prescription.duration_seconds,
            prescription.work_seconds,
            prescription.rest_seconds,
        )
        + TRANSITION_MINUTES
    )


def exercise_minutes(exercise: GeneratedExercise) -> float:
    if exercise.role is ExerciseRole.warmup:
        return WARMUP_MINUTES
    return (
        estimate_minutes(
            exercise.sets,
            exercise.reps_min,
            exercise.reps_max,
            exercise.duration_seconds,
            exercise.work_seconds,
            exercise.rest_seconds,
        )
        + TRANSITION_MINUTES
    )


def block_minutes(exercises: Iterable[GeneratedExercise], roles: Iterable[ExerciseRole]) -> float:
    wanted = frozenset(roles)
    return sum(exercise_minutes(exercise) for exercise in exercises if exercise.role in wanted)


def strength_block_minutes(exercises: Iterable[GeneratedExercise]) -> float:
    return block_minutes(exercises, STRENGTH_ROLES)


def average_cardio_minutes() -> float:
    minutes = [prescription_minutes(cardio_prescription(cardio_type)) for cardio_type in CardioType]
    return sum(minutes) / len(minutes)


def role_minutes(role: ExerciseRole, experience: Difficulty, template: ProgramTemplate) -> float:
    return prescription_minutes(role_prescription(role, experience, template))


def plan_counts(budget: MinuteBudget, experience: Difficulty, template: ProgramTemplate) -> ExerciseCounts:
    primary_time = role_minutes(ExerciseRole.primary, experience, template)
    secondary_time = role_minutes(ExerciseRole.secondary, experience, template)
    isolation_time = role_minutes(ExerciseRole.isolation, experience, template)
    power_time = role_minutes(ExerciseRole.power, experience, template)

    warmup = int(budget.warmup // WARMUP_MINUTES)
    power = min(MAX_POWER, int(budget.power // power_time)) if budget.power > 0 else 0

    if budget.strength >= primary_time:
        primary = min(MAX_PRIMARY, max(1, int(budget.strength // (2 * primary_time))))
    else:
        primary = 0
    remaining = budget.strength - primary * primary_time
    secondary = int(remaining * SECONDARY_SHARE // secondary_time) if remaining > 0 else 0
    remaining -= secondary * secondary_time
    isolation = int(remaining * ISOLATION_SHARE // isolation_time) if remaining > 0 else 0

    cardio = 0
    if template.cardio_exercises > 0 and budget.cardio > 0:
        cardio = min(template.cardio_exercises, max(1, int(budget.cardio // average_cardio_minutes())))

    counts = ExerciseCounts(
        warmup=warmup,
        power=power,
        primary=primary,
        secondary=secondary,
        isolation=isolation,
        cardio=cardio,
    )
    logger.debug("exercise_counts_planned", bucket=budget.bucket, strength_minutes=budget.strength, counts=counts)
    return counts
