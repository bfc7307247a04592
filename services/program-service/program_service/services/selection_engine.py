from __future__ import annotations

import math
from collections.abc import Iterable
from enum import Enum

import structlog

from ..schemas import (
    STRENGTH_PATTERNS,
    CardioType,
    DayFocus,
    Difficulty,
    Exercise,
    ExerciseCategory,
    ExerciseRole,
    MovementPattern,
)
from .ability_model import AbilityModel
from .exercise_index import ExerciseIndex
from .generation_context import DaySelection, GenerationContext, SelectedExercise
from .time_budget import ExerciseCounts
from .weekly_distribution import DayPlan

logger = structlog.get_logger(__name__)

P = MovementPattern

MIN_DAYS_BETWEEN = 2
REQUIRED_STRETCH = 1
ACCESSORY_EXTRA = 2
MAX_DAILY_COMPOUNDS = 4

REQUIRED_MOVEMENTS: dict[Difficulty, tuple[str, ...]] = {
    Difficulty.beginner: ("Goblet Squat", "Dumbbell Romanian Deadlift", "Push-Up", "Dumbbell Row", "Farmer's Carry"),
    Difficulty.intermediate: ("Back Squat", "Romanian Deadlift", "Bench Press", "Pull-Up", "Farmer's Carry"),
    Difficulty.advanced: ("Back Squat", "Deadlift", "Bench Press", "Pull-Up", "Farmer's Carry"),
}

REQUIRED_ALTERNATIVES: dict[str, tuple[str, ...]] = {
    "Goblet Squat": ("Dumbbell Squat", "Bodyweight Box Squat"),
    "Back Squat": ("Front Squat", "Goblet Squat", "Dumbbell Squat"),
    "Dumbbell Romanian Deadlift": ("Kettlebell Deadlift", "Romanian Deadlift", "Hip Thrust"),
    "Romanian Deadlift": ("Dumbbell Romanian Deadlift", "Trap Bar Deadlift", "Kettlebell Deadlift"),
    "Deadlift": ("Trap Bar Deadlift", "Romanian Deadlift", "Dumbbell Romanian Deadlift"),
    "Push-Up": ("Incline Push-Up", "Dumbbell Floor Press", "Dumbbell Bench Press"),
    "Bench Press": ("Dumbbell Bench Press", "Push-Up"),
    "Dumbbell Row": ("Chest-Supported Dumbbell Row", "Inverted Row", "Barbell Row"),
    "Pull-Up": ("Chin-Up", "Lat Pulldown", "Band-Assisted Pull-Up", "Inverted Row"),
    "Farmer's Carry": ("Suitcase Carry", "Overhead Carry"),
}

# Anti-movement work that balances each day focus.
ANTI_MOVEMENT_PATTERNS: dict[DayFocus, tuple[MovementPattern, ...]] = {
    DayFocus.squat: (P.core,),
    DayFocus.hinge: (P.carry,),
    DayFocus.athletic: (P.rotation,),
    DayFocus.upper_push: (P.core,),
    DayFocus.upper_pull: (P.rotation,),
    DayFocus.unilateral: (P.carry, P.rotation),
}


class DayTheme(str, Enum):
    push = "push"
    pull = "pull"
    leg = "leg"
    mixed = "mixed"


PATTERN_THEMES: dict[MovementPattern, DayTheme] = {
    P.horizontal_push: DayTheme.push,
    P.vertical_push: DayTheme.push,
    P.horizontal_pull: DayTheme.pull,
    P.vertical_pull: DayTheme.pull,
    P.squat: DayTheme.leg,
    P.lunge: DayTheme.leg,
    P.hinge: DayTheme.leg,
}

THEME_PATTERNS: dict[DayTheme, tuple[MovementPattern, ...]] = {
    DayTheme.push: (P.horizontal_push, P.vertical_push),
    DayTheme.pull: (P.horizontal_pull, P.vertical_pull),
    DayTheme.leg: (P.squat, P.lunge, P.hinge),
    DayTheme.mixed: tuple(pattern for pattern in STRENGTH_PATTERNS if pattern in PATTERN_THEMES),
}

ANTAGONIST_MUSCLES: dict[str, tuple[str, ...]] = {
    "chest": ("upper_back", "lats"),
    "upper_back": ("chest",),
    "lats": ("chest", "front_delts"),
    "front_delts": ("rear_delts", "lats"),
    "rear_delts": ("front_delts",),
    "biceps": ("triceps",),
    "triceps": ("biceps",),
    "quadriceps": ("hamstrings",),
    "hamstrings": ("quadriceps",),
    "glutes": ("hip_flexors",),
    "hip_flexors": ("glutes",),
    "abs": ("lower_back",),
    "lower_back": ("abs",),
    "adductors": ("glute_medius",),
    "glute_medius": ("adductors",),
}

NEW_MUSCLE_SCORE = 100
ANTAGONIST_SCORE = 60
REHIT_SCORE = 40


def classify_day_theme(patterns: Iterable[MovementPattern]) -> DayTheme:
    themes = {PATTERN_THEMES[pattern] for pattern in patterns if pattern in PATTERN_THEMES}
    if len(themes) == 1:
        return themes.pop()
    return DayTheme.mixed


def score_isolation(exercise: Exercise, hit_muscles: set[str]) -> int:
    """Additive: a new muscle, an antagonist of something hit, a re-hit."""
    muscles = set(exercise.primary_muscles)
    antagonists = {antagonist for muscle in hit_muscles for antagonist in ANTAGONIST_MUSCLES.get(muscle, ())}
    score = 0
    if muscles - hit_muscles:
        score += NEW_MUSCLE_SCORE
    if muscles & antagonists:
        score += ANTAGONIST_SCORE
    if muscles & hit_muscles:
        score += REHIT_SCORE
    return score


class SelectionEngine:
    """Picks each day's exercises in a fixed phase order against the weekly trackers."""

    def __init__(
        self,
        index: ExerciseIndex,
        ability: AbilityModel,
        context: GenerationContext,
        counts: ExerciseCounts,
    ):
        self.index = index
        self.ability = ability
        self.context = context
        self.counts = counts
        # Compound selection fills the planned slots; only the time-gap fallback may reach the cap.
        self.compound_cap = min(MAX_DAILY_COMPOUNDS, index.compound_total() // context.days_per_week + 1)
        self.compound_slots = min(counts.compound, self.compound_cap)
        self.accessory_target = self.compound_slots + counts.isolation + ACCESSORY_EXTRA

    def can_use(self, exercise: Exercise, selection: DaySelection) -> bool:
        day = selection.day
        context = self.context
        if context.is_last_day(day) and exercise.id in context.day_one_ids:
            return False

        if exercise.category is ExerciseCategory.compound:
            since_pattern = context.days_since_pattern(exercise.movement_pattern, day)
            if since_pattern is not None and since_pattern < MIN_DAYS_BETWEEN:
                return False
            since_exercise = context.days_since_exercise(exercise.id, day)
            return since_exercise is None or since_exercise >= MIN_DAYS_BETWEEN

        if exercise.category in (ExerciseCategory.power, ExerciseCategory.core):
            return exercise.id not in context.exercise_last_used

        muscles = set(exercise.primary_muscles)
        if muscles & selection.accessory_muscles:
            return False
        if muscles & context.previous_day_muscles:
            return False
        since_exercise = context.days_since_exercise(exercise.id, day)
        return since_exercise is None or since_exercise >= MIN_DAYS_BETWEEN

    def _role_for(self, exercise: Exercise, selection: DaySelection) -> ExerciseRole:
        category = exercise.category
        if category is ExerciseCategory.compound:
            primaries = sum(1 for item in selection.compounds if item.role is ExerciseRole.primary)
            if exercise.movement_pattern in selection.plan.primary_patterns and primaries < self.counts.primary:
                return ExerciseRole.primary
            return ExerciseRole.secondary
        if category is ExerciseCategory.power:
            return ExerciseRole.power
        if category is ExerciseCategory.isolation:
            return ExerciseRole.isolation
        if category is ExerciseCategory.core:
            return ExerciseRole.core
        if category is ExerciseCategory.cardio:
            return ExerciseRole.cardio
        return ExerciseRole.warmup

    def admit(
        self,
        selection: DaySelection,
        exercise: Exercise,
        role: ExerciseRole | None = None,
        required: bool = False,
    ) -> SelectedExercise:
        item = SelectedExercise(
            exercise=exercise,
            role=role or self._role_for(exercise, selection),
            equipment=self.index.equipment_for(exercise),
            required=required,
        )
        selection.block_for(exercise.category).append(item)
        self.context.mark_used(exercise, selection.day)
        if exercise.category in (ExerciseCategory.compound, ExerciseCategory.power):
            selection.heavy_muscles.update(exercise.primary_muscles)
        elif exercise.category in (ExerciseCategory.isolation, ExerciseCategory.core):
            selection.accessory_muscles.update(exercise.primary_muscles)
        if exercise.movement_pattern is not MovementPattern.cardio:
            selection.pattern_counts[exercise.movement_pattern] += 1
        return item

    def try_admit(self, selection: DaySelection, exercise: Exercise) -> bool:
        if not self.can_use(exercise, selection):
            return False
        self.admit(selection, exercise)
        return True

    def select_day(self, plan: DayPlan, cardio_type: CardioType | None = None) -> DaySelection:
        selection = DaySelection(plan=plan, cardio_type=cardio_type)
        self._inject_required(selection)
        self._inject_core(selection)
        self._select_compounds(selection)
        self._select_isolations(selection)
        self._fill_accessories(selection)
        self._select_cardio(selection)
        logger.debug(
            "day_selected",
            day=plan.index,
            focus=plan.focus.value,
            compounds=[item.exercise.name for item in selection.compounds],
            isolations=[item.exercise.name for item in selection.isolations],
            core=[item.exercise.name for item in selection.core],
            cardio=[item.exercise.name for item in selection.cardio],
        )
        return selection

    def _inject_required(self, selection: DaySelection) -> None:
        today = set(selection.plan.patterns)
        for movement in REQUIRED_MOVEMENTS[self.ability.experience]:
            if movement in self.context.required_placed:
                continue
            for name in (movement,) + REQUIRED_ALTERNATIVES.get(movement, ()):
                exercise = self.index.find(name)
                if exercise is None:
                    continue
                if exercise.movement_pattern not in today:
                    continue
                if not self.ability.allows(exercise, stretch=REQUIRED_STRETCH):
                    continue
                if not self.can_use(exercise, selection):
                    continue
                self.admit(selection, exercise, required=True)
                self.context.required_placed.add(movement)
                break
            else:
                logger.debug("required_movement_not_placed", movement=movement, day=selection.day)

    def _inject_core(self, selection: DaySelection) -> None:
        if MovementPattern.core not in selection.plan.patterns:
            return
        for exercise in self.index.for_pattern(MovementPattern.core, ExerciseCategory.core):
            if self.try_admit(selection, exercise):
                return
        selection.unfilled["accessory"] += 1

    def _select_compounds(self, selection: DaySelection) -> None:
        for tier in selection.plan.tiers:
            remaining = self.compound_slots - len(selection.compounds)
            if remaining <= 0:
                return
            if not tier:
                continue
            per_pattern = math.ceil(remaining / len(tier))
            for pattern in tier:
                taken = 0
                for exercise in self.index.for_pattern(pattern, ExerciseCategory.compound):
                    if taken >= per_pattern or len(selection.compounds) >= self.compound_slots:
                        break
                    if self.try_admit(selection, exercise):
                        taken += 1
        missing = self.compound_slots - len(selection.compounds)
        if missing > 0:
            selection.unfilled["compound"] += missing

    def _select_isolations(self, selection: DaySelection) -> None:
        if self.counts.isolation <= 0:
            return
        theme = classify_day_theme(item.exercise.movement_pattern for item in selection.compounds)
        hit = selection.heavy_muscles | selection.accessory_muscles
        candidates = [
            exercise
            for pattern in THEME_PATTERNS[theme]
            for exercise in self.index.for_pattern(pattern, ExerciseCategory.isolation)
        ]
        ranked = sorted(candidates, key=lambda exercise: -score_isolation(exercise, hit))
        for exercise in ranked:
            if len(selection.isolations) >= self.counts.isolation:
                break
            self.try_admit(selection, exercise)
        missing = self.counts.isolation - len(selection.isolations)
        if missing > 0:
            selection.unfilled["isolation"] += missing

    def _accessory_categories(self, selection: DaySelection) -> list[ExerciseCategory]:
        categories = [ExerciseCategory.core]
        if len(selection.isolations) < self.counts.isolation:
            categories.append(ExerciseCategory.isolation)
        return categories

    def _fill_accessories(self, selection: DaySelection) -> None:
        for pattern in ANTI_MOVEMENT_PATTERNS.get(selection.plan.focus, ()):
            if len(selection.strength) >= self.accessory_target:
                return
            categories = self._accessory_categories(selection)
            if len(selection.compounds) < self.compound_slots:
                categories.append(ExerciseCategory.compound)
            for exercise in self.index.for_pattern(pattern, *categories):
                if self.try_admit(selection, exercise):
                    break

        for tier in selection.plan.tiers:
            for pattern in tier:
                if len(selection.strength) >= self.accessory_target:
                    return
                for exercise in self.index.for_pattern(pattern, *self._accessory_categories(selection)):
                    if self.try_admit(selection, exercise):
                        break
        missing = self.accessory_target - len(selection.strength)
        if missing > 0:
            selection.unfilled["accessory"] += missing

    def _select_cardio(self, selection: DaySelection) -> None:
        if self.counts.cardio <= 0:
            return
        for exercise in self.index.cardio:
            if len(selection.cardio) >= self.counts.cardio:
                break
            self.try_admit(selection, exercise)
        missing = self.counts.cardio - len(selection.cardio)
        if missing > 0:
            selection.unfilled["cardio"] += missing

    def _gap_candidate(self, selection: DaySelection) -> Exercise | None:
        patterns = sorted(
            STRENGTH_PATTERNS,
            key=lambda pattern: (selection.pattern_counts[pattern], self.context.weekly_pattern_counts[pattern]),
        )
        for pattern in patterns:
            for exercise in self.index.for_pattern(pattern, ExerciseCategory.compound):
                if self.can_use(exercise, selection):
                    return exercise
        return None

    def fill_time_gap(
        self,
        selection: DaySelection,
        current_minutes: float,
        budget_minutes: float,
        minutes_per_compound: float,
        threshold: float,
    ) -> int:
        """Add secondary compounds while the strength block is short by `threshold` or more."""
        added = 0
        while budget_minutes - current_minutes >= threshold and len(selection.compounds) < self.compound_cap:
            exercise = self._gap_candidate(selection)
            if exercise is None:
                break
            self.admit(selection, exercise, role=ExerciseRole.secondary)
            current_minutes += minutes_per_compound
            added += 1
        if added:
            logger.debug("time_gap_filled", day=selection.day, added=added, estimated_minutes=current_minutes)
        return added
