from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field

import structlog

from ..schemas import Exercise, ExerciseCategory, MovementPattern, difficulty_rank
from .ability_model import AbilityModel

logger = structlog.get_logger(__name__)

BODYWEIGHT = "bodyweight"


def owned_equipment(equipment: Iterable[str]) -> frozenset[str]:
    return frozenset(item.strip().lower() for item in equipment if item and item.strip()) | {BODYWEIGHT}


def resolve_equipment(exercise: Exercise, owned: frozenset[str]) -> str | None:
    """First equipment option the user can satisfy, or None."""
    for option in exercise.equipment:
        if option.strip().lower() in owned:
            return option
    return None


def _hardest_first(exercises: list[Exercise]) -> list[Exercise]:
    return sorted(exercises, key=lambda exercise: -difficulty_rank(exercise.difficulty))


@dataclass
class ExerciseIndex:
    owned: frozenset[str]
    warmups: list[Exercise] = field(default_factory=list)
    cardio: list[Exercise] = field(default_factory=list)
    by_pattern: dict[MovementPattern, list[Exercise]] = field(default_factory=dict)
    # Equipment-satisfied rows of every difficulty, for name lookups.
    by_name: dict[str, Exercise] = field(default_factory=dict)

    def for_pattern(self, pattern: MovementPattern, *categories: ExerciseCategory) -> list[Exercise]:
        exercises = self.by_pattern.get(pattern, [])
        if not categories:
            return list(exercises)
        return [exercise for exercise in exercises if exercise.category in categories]

    def find(self, name: str) -> Exercise | None:
        return self.by_name.get(name.strip().lower())

    def equipment_for(self, exercise: Exercise) -> str:
        resolved = resolve_equipment(exercise, self.owned)
        return resolved if resolved is not None else BODYWEIGHT

    def compound_total(self) -> int:
        return sum(len(self.for_pattern(pattern, ExerciseCategory.compound)) for pattern in self.by_pattern)


def build_exercise_index(
    catalog: Iterable[Exercise],
    equipment: Iterable[str],
    ability: AbilityModel,
) -> ExerciseIndex:
    index = ExerciseIndex(owned=owned_equipment(equipment))
    grouped: dict[MovementPattern, list[Exercise]] = {}

    for exercise in catalog:
        if resolve_equipment(exercise, index.owned) is None:
            continue
        index.by_name.setdefault(exercise.name.strip().lower(), exercise)
        if not ability.allows(exercise):
            continue
        if exercise.category is ExerciseCategory.warmup:
            index.warmups.append(exercise)
        elif exercise.movement_pattern is MovementPattern.cardio:
            index.cardio.append(exercise)
        else:
            grouped.setdefault(exercise.movement_pattern, []).append(exercise)

    index.by_pattern = {pattern: _hardest_first(exercises) for pattern, exercises in grouped.items()}
    logger.debug(
        "exercise_index_built",
        warmups=len(index.warmups),
        cardio=len(index.cardio),
        patterns={pattern.value: len(exercises) for pattern, exercises in index.by_pattern.items()},
    )
    return index
