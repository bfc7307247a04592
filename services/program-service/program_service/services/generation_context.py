from __future__ import annotations

from collections import Counter
from collections.abc import Iterable
from dataclasses import dataclass, field

from ..schemas import CardioType, Exercise, ExerciseCategory, ExerciseRole, MovementPattern
from .weekly_distribution import DayPlan


@dataclass
class SelectedExercise:
    exercise: Exercise
    role: ExerciseRole
    equipment: str
    required: bool = False


@dataclass
class DaySelection:
    """Everything the engine picked for one day, grouped by assembly block."""

    plan: DayPlan
    cardio_type: CardioType | None = None
    warmups: list[SelectedExercise] = field(default_factory=list)
    power: list[SelectedExercise] = field(default_factory=list)
    compounds: list[SelectedExercise] = field(default_factory=list)
    isolations: list[SelectedExercise] = field(default_factory=list)
    core: list[SelectedExercise] = field(default_factory=list)
    cardio: list[SelectedExercise] = field(default_factory=list)
    # Compound and power muscles: what the next day must let recover.
    heavy_muscles: set[str] = field(default_factory=set)
    # Muscles already hit by today's isolation and core work.
    accessory_muscles: set[str] = field(default_factory=set)
    pattern_counts: Counter = field(default_factory=Counter)
    unfilled: Counter = field(default_factory=Counter)

    @property
    def day(self) -> int:
        return self.plan.index

    @property
    def strength(self) -> list[SelectedExercise]:
        return self.compounds + self.isolations + self.core

    def block_for(self, category: ExerciseCategory) -> list[SelectedExercise]:
        if category is ExerciseCategory.power:
            return self.power
        if category is ExerciseCategory.compound:
            return self.compounds
        if category is ExerciseCategory.isolation:
            return self.isolations
        if category is ExerciseCategory.core:
            return self.core
        if category is ExerciseCategory.cardio:
            return self.cardio
        return self.warmups


@dataclass
class GenerationContext:
    """Request-scoped trackers; a fresh instance is created for every program."""

    days_per_week: int
    exercise_last_used: dict[str, int] = field(default_factory=dict)
    pattern_last_used: dict[MovementPattern, int] = field(default_factory=dict)
    day_one_ids: set[str] = field(default_factory=set)
    previous_day_muscles: set[str] = field(default_factory=set)
    required_placed: set[str] = field(default_factory=set)
    weekly_pattern_counts: Counter = field(default_factory=Counter)

    def is_last_day(self, day: int) -> bool:
        return self.days_per_week > 1 and day == self.days_per_week

    def days_since_exercise(self, exercise_id: str, day: int) -> int | None:
        last = self.exercise_last_used.get(exercise_id)
        return None if last is None else day - last

    def days_since_pattern(self, pattern: MovementPattern, day: int) -> int | None:
        last = self.pattern_last_used.get(pattern)
        return None if last is None else day - last

    def mark_used(self, exercise: Exercise, day: int) -> None:
        self.exercise_last_used[exercise.id] = day
        if exercise.category is ExerciseCategory.compound:
            self.pattern_last_used[exercise.movement_pattern] = day
        if day == 1:
            self.day_one_ids.add(exercise.id)
        self.weekly_pattern_counts[exercise.movement_pattern] += 1

    def roll_day(self, heavy_muscles: Iterable[str], rest_day_follows: bool) -> None:
        self.previous_day_muscles = set() if rest_day_follows else set(heavy_muscles)
