from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MovementPattern(str, Enum):
    horizontal_push = "horizontal_push"
    vertical_push = "vertical_push"
    horizontal_pull = "horizontal_pull"
    vertical_pull = "vertical_pull"
    squat = "squat"
    lunge = "lunge"
    hinge = "hinge"
    core = "core"
    rotation = "rotation"
    carry = "carry"
    cardio = "cardio"


# The ten strength patterns, in the order used for fallback walks and display.
STRENGTH_PATTERNS: tuple[MovementPattern, ...] = (
    MovementPattern.horizontal_push,
    MovementPattern.vertical_push,
    MovementPattern.horizontal_pull,
    MovementPattern.vertical_pull,
    MovementPattern.squat,
    MovementPattern.lunge,
    MovementPattern.hinge,
    MovementPattern.core,
    MovementPattern.rotation,
    MovementPattern.carry,
)


class ExerciseCategory(str, Enum):
    warmup = "warmup"
    power = "power"
    compound = "compound"
    isolation = "isolation"
    core = "core"
    cardio = "cardio"


class Difficulty(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


DIFFICULTY_ORDER: tuple[Difficulty, ...] = (
    Difficulty.beginner,
    Difficulty.intermediate,
    Difficulty.advanced,
)


def difficulty_rank(difficulty: Difficulty) -> int:
    return DIFFICULTY_ORDER.index(Difficulty(difficulty))


class TrackingType(str, Enum):
    reps = "reps"
    duration = "duration"


class Exercise(BaseModel):
    """Catalog row. Read-only for the whole generation call."""

    model_config = ConfigDict(frozen=True)

    id: str
    name: str = Field(..., max_length=255)
    movement_pattern: MovementPattern
    category: ExerciseCategory
    equipment: list[str] = Field(default_factory=lambda: ["bodyweight"], description="Any one option is enough")
    difficulty: Difficulty = Difficulty.beginner
    primary_muscles: list[str] = Field(default_factory=list)
    tracking_type: TrackingType = TrackingType.reps
    recommended_tempo: str | None = Field(None, description="Tempo notation, e.g. 2-0-1-0")
