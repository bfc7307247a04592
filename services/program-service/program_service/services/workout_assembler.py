from __future__ import annotations

import string
from collections.abc import Iterable

import structlog

from ..config import Settings
from ..schemas import (
    STRENGTH_ROLES,
    DayFocus,
    Exercise,
    ExerciseCategory,
    ExerciseRole,
    GeneratedExercise,
    GeneratedWorkout,
    MovementPattern,
    WorkoutType,
)
from .exercise_index import ExerciseIndex
from .generation_context import DaySelection, SelectedExercise
from .prescription import Prescriber
from .selection_engine import SelectionEngine
from .time_budget import ExerciseCounts, block_minutes, exercise_minutes, strength_block_minutes

logger = structlog.get_logger(__name__)

P = MovementPattern

WARMUPS_BY_FOCUS: dict[DayFocus, tuple[str, ...]] = {
    DayFocus.squat: ("Jumping Jacks", "Bodyweight Squat", "Hip Circles", "Leg Swings"),
    DayFocus.hinge: ("Glute Bridge", "Leg Swings", "Hip Circles", "Cat-Cow"),
    DayFocus.athletic: ("Inchworm", "World's Greatest Stretch", "Jumping Jacks", "Leg Swings"),
    DayFocus.upper_push: ("Arm Circles", "Scapular Push-Up", "Band Pull-Apart", "Thoracic Rotation"),
    DayFocus.upper_pull: ("Band Pull-Apart", "Cat-Cow", "Arm Circles", "Thoracic Rotation"),
    DayFocus.unilateral: ("Lateral Lunge Stretch", "Bodyweight Reverse Lunge", "Leg Swings", "Hip Circles"),
}

POWER_BY_FOCUS: dict[DayFocus, tuple[str, ...]] = {
    DayFocus.squat: ("Box Jump", "Jump Squat"),
    DayFocus.hinge: ("Kettlebell Swing", "Broad Jump"),
    DayFocus.athletic: ("Medicine Ball Slam", "Broad Jump"),
    DayFocus.upper_push: ("Plyometric Push-Up", "Medicine Ball Chest Pass"),
    DayFocus.upper_pull: ("Medicine Ball Slam", "Dumbbell Snatch"),
    DayFocus.unilateral: ("Split Jump", "Skater Jump"),
}

# Patterns that can share a superset without competing for the same muscles.
PAIRING_COMPATIBILITY: dict[MovementPattern, tuple[MovementPattern, ...]] = {
    P.horizontal_push: (P.horizontal_pull, P.vertical_pull, P.hinge),
    P.vertical_push: (P.vertical_pull, P.horizontal_pull, P.lunge),
    P.horizontal_pull: (P.horizontal_push, P.vertical_push, P.squat),
    P.vertical_pull: (P.vertical_push, P.horizontal_push, P.hinge),
    P.squat: (P.horizontal_pull, P.vertical_pull, P.core, P.horizontal_push),
    P.lunge: (P.vertical_push, P.horizontal_pull, P.rotation),
    P.hinge: (P.horizontal_push, P.vertical_push, P.core),
    P.core: (P.squat, P.hinge, P.horizontal_push),
    P.rotation: (P.lunge, P.squat, P.carry),
    P.carry: (P.rotation, P.vertical_pull),
}

PUSH_PATTERNS = frozenset({P.horizontal_push, P.vertical_push})
PULL_PATTERNS = frozenset({P.horizontal_pull, P.vertical_pull})
LEG_PATTERNS = frozenset({P.squat, P.lunge, P.hinge})
CORE_PATTERNS = frozenset({P.core, P.rotation, P.carry})

# (push, pull, legs) -> name
WORKOUT_NAMES: dict[tuple[bool, bool, bool], str] = {
    (True, True, True): "Full Body Strength",
    (True, True, False): "Upper Body Strength",
    (True, False, True): "Push & Legs Strength",
    (False, True, True): "Pull & Legs Strength",
    (True, False, False): "Upper Body Push",
    (False, True, False): "Upper Body Pull",
    (False, False, True): "Lower Body Strength",
}

MIN_SETS = 2
MAX_SETS = 5
MIN_REST_SECONDS = 30
MAX_REST_SECONDS = 180
REST_STEP_SECONDS = 15
MAX_FIT_STEPS = 200


def workout_name(patterns: Iterable[MovementPattern]) -> str:
    present = set(patterns)
    base = WORKOUT_NAMES.get(
        (bool(present & PUSH_PATTERNS), bool(present & PULL_PATTERNS), bool(present & LEG_PATTERNS))
    )
    if base is None:
        return "Core & Conditioning" if present & CORE_PATTERNS else "Conditioning"
    if present & CORE_PATTERNS:
        return f"{base} + Core"
    return base


def patterns_compatible(first: MovementPattern | None, second: MovementPattern | None) -> bool:
    if first is None or second is None:
        return False
    return second in PAIRING_COMPATIBILITY.get(first, ()) or first in PAIRING_COMPATIBILITY.get(second, ())


def pair_warmups(warmups: list[GeneratedExercise]) -> None:
    for number, start in enumerate(range(0, len(warmups) - 1, 2), start=1):
        for order, warmup in enumerate(warmups[start : start + 2], start=1):
            warmup.superset_group = f"W{number}"
            warmup.superset_order = order


def pair_main_exercises(exercises: list[GeneratedExercise]) -> list[GeneratedExercise]:
    """Pair each unpaired exercise with its first compatible unpaired partner.

    The leader of a pair rests 0 seconds; partners move up to sit right after
    their leader.
    """
    labels = iter(string.ascii_uppercase)
    partners: dict[int, int] = {}
    paired: set[int] = set()
    for i, first in enumerate(exercises):
        if i in paired:
            continue
        for j in range(i + 1, len(exercises)):
            if j in paired or not patterns_compatible(first.movement_pattern, exercises[j].movement_pattern):
                continue
            group = next(labels)
            second = exercises[j]
            first.superset_group, first.superset_order, first.rest_seconds = group, 1, 0
            second.superset_group, second.superset_order = group, 2
            partners[i] = j
            paired.update((i, j))
            break

    ordered: list[GeneratedExercise] = []
    for i, exercise in enumerate(exercises):
        if i in paired and i not in partners:
            continue
        ordered.append(exercise)
        if i in partners:
            ordered.append(exercises[partners[i]])
    return ordered


def _unique(exercises: Iterable[Exercise]) -> list[Exercise]:
    seen: set[str] = set()
    unique: list[Exercise] = []
    for exercise in exercises:
        if exercise.id not in seen:
            seen.add(exercise.id)
            unique.append(exercise)
    return unique


class WorkoutAssembler:
    def __init__(
        self,
        index: ExerciseIndex,
        engine: SelectionEngine,
        prescriber: Prescriber,
        counts: ExerciseCounts,
        session_minutes: int,
        settings: Settings,
    ):
        self.index = index
        self.engine = engine
        self.prescriber = prescriber
        self.counts = counts
        self.session_minutes = session_minutes
        self.settings = settings

    def choose_openers(self, selection: DaySelection) -> None:
        """Pick power work and warmups for the day's focus. Runs once per day."""
        self._choose_power(selection)
        self._choose_warmups(selection)

    def _choose_power(self, selection: DaySelection) -> None:
        if self.counts.power <= 0:
            return
        candidates: list[Exercise] = []
        for name in POWER_BY_FOCUS.get(selection.plan.focus, ()):
            exercise = self.index.find(name)
            if (
                exercise is None
                or exercise.category is not ExerciseCategory.power
                or not self.engine.ability.allows(exercise)
            ):
                logger.debug("focus_power_unavailable", name=name, focus=selection.plan.focus.value)
                continue
            candidates.append(exercise)
        for tier in selection.plan.tiers:
            for pattern in tier:
                candidates.extend(self.index.for_pattern(pattern, ExerciseCategory.power))

        for exercise in _unique(candidates):
            if len(selection.power) >= self.counts.power:
                break
            self.engine.try_admit(selection, exercise)
        missing = self.counts.power - len(selection.power)
        if missing > 0:
            selection.unfilled["power"] += missing

    def _choose_warmups(self, selection: DaySelection) -> None:
        if self.counts.warmup <= 0 or not self.index.warmups:
            return
        by_name = {exercise.name.lower(): exercise for exercise in self.index.warmups}
        candidates: list[Exercise] = []
        for name in WARMUPS_BY_FOCUS.get(selection.plan.focus, ()):
            exercise = by_name.get(name.lower())
            if exercise is None:
                logger.debug("focus_warmup_unavailable", name=name, focus=selection.plan.focus.value)
                continue
            candidates.append(exercise)
        today = set(selection.plan.patterns)
        candidates.extend(exercise for exercise in self.index.warmups if exercise.movement_pattern in today)
        candidates.extend(self.index.warmups)

        pool = _unique(candidates)
        count = self.counts.warmup
        # Warmups run in pairs; borrow one more rather than leave one alone.
        if count % 2 == 1 and len(pool) > count:
            count += 1
        selection.warmups = [
            SelectedExercise(exercise=exercise, role=ExerciseRole.warmup, equipment=self.index.equipment_for(exercise))
            for exercise in pool[:count]
        ]

    def assemble(self, selection: DaySelection, strength_budget: float) -> GeneratedWorkout:
        prescribe = self.prescriber.prescribe

        warmups = [prescribe(item) for item in selection.warmups]
        pair_warmups(warmups)
        power = [prescribe(item) for item in selection.power]

        compounds = sorted(selection.compounds, key=lambda item: item.role is not ExerciseRole.primary)
        main = [prescribe(item) for item in compounds + selection.isolations + selection.core]
        if self.session_minutes <= self.settings.PROGRAM_SUPERSET_MAX_SESSION_MINUTES:
            main = pair_main_exercises(main)

        cardio = [prescribe(item, selection.cardio_type) for item in selection.cardio]
        exercises = warmups + power + main + cardio

        strength_minutes = strength_block_minutes(exercises)
        cardio_minutes = block_minutes(cardio, (ExerciseRole.cardio,))
        patterns = list(dict.fromkeys(item.movement_pattern for item in main if item.movement_pattern is not None))
        movement_focus = patterns + ([MovementPattern.cardio] if cardio else [])

        return GeneratedWorkout(
            day_index=selection.day,
            name=workout_name(patterns),
            workout_type=WorkoutType.cardio if cardio_minutes > strength_minutes else WorkoutType.strength,
            focus=selection.plan.focus,
            movement_focus=movement_focus,
            cardio_type=selection.cardio_type if cardio else None,
            estimated_strength_minutes=round(strength_minutes, 2),
            strength_budget_minutes=round(strength_budget, 2),
            exercises=exercises,
        )

    def fit_to_budget(self, workout: GeneratedWorkout, strength_budget: float) -> None:
        """Nudge sets, then rest, on the strength block until it sits within tolerance of the budget."""
        items = [exercise for exercise in workout.exercises if exercise.role in STRENGTH_ROLES]
        if not items or strength_budget <= 0:
            return
        tolerance = self.settings.PROGRAM_BUDGET_TOLERANCE_MINUTES
        total = strength_block_minutes(items)

        for attribute in ("sets", "rest_seconds"):
            for _ in range(MAX_FIT_STEPS):
                gap = strength_budget - total
                if abs(gap) <= tolerance:
                    break
                direction = 1 if gap > 0 else -1
                best: tuple[float, GeneratedExercise, int, float] | None = None
                for item in items:
                    value = self._nudged(item, attribute, direction)
                    if value is None:
                        continue
                    delta = exercise_minutes(item.model_copy(update={attribute: value})) - exercise_minutes(item)
                    new_gap = abs(gap - delta)
                    if new_gap < abs(gap) and (best is None or new_gap < best[0]):
                        best = (new_gap, item, value, delta)
                if best is None:
                    break
                _, item, value, delta = best
                setattr(item, attribute, value)
                total += delta

        workout.estimated_strength_minutes = round(total, 2)
        if abs(strength_budget - total) > tolerance:
            logger.info(
                "strength_budget_not_met",
                day=workout.day_index,
                budget=strength_budget,
                estimated=round(total, 2),
            )

    @staticmethod
    def _nudged(item: GeneratedExercise, attribute: str, direction: int) -> int | None:
        if attribute == "sets":
            value = item.sets + direction
            return value if MIN_SETS <= value <= MAX_SETS else None
        # Superset leaders keep their zero rest.
        if item.rest_seconds <= 0:
            return None
        value = item.rest_seconds + direction * REST_STEP_SECONDS
        return value if MIN_REST_SECONDS <= value <= MAX_REST_SECONDS else None
