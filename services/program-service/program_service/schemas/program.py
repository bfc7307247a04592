from datetime import date
from enum import Enum

from pydantic import BaseModel, Field

from .exercise import Exercise, ExerciseCategory, MovementPattern
from .profile import Assessment, UserProfile


class WorkoutType(str, Enum):
    strength = "strength"
    cardio = "cardio"


class ExerciseRole(str, Enum):
    warmup = "warmup"
    power = "power"
    primary = "primary"
    secondary = "secondary"
    isolation = "isolation"
    core = "core"
    cardio = "cardio"


# Roles whose time counts against the strength block of a session.
STRENGTH_ROLES: frozenset[ExerciseRole] = frozenset(
    {ExerciseRole.primary, ExerciseRole.secondary, ExerciseRole.isolation, ExerciseRole.core}
)


class CardioType(str, Enum):
    hiit = "HIIT"
    steady_state = "Steady State"
    zone_2 = "Zone 2"
    tempo = "Tempo"
    metabolic_circuits = "Metabolic Circuits"


class DayFocus(str, Enum):
    squat = "squat"
    hinge = "hinge"
    athletic = "athletic"
    upper_push = "upper_push"
    upper_pull = "upper_pull"
    unilateral = "unilateral"


class GeneratedExercise(BaseModel):
    exercise_id: str
    exercise_name: str
    equipment: str
    sets: int = Field(..., ge=1)
    reps_min: int | None = None
    reps_max: int | None = None
    duration_seconds: int | None = None
    work_seconds: int | None = None
    rest_seconds: int = Field(default=0, ge=0)
    target_rpe: int | None = Field(None, ge=1, le=10)
    target_rir: int | None = Field(None, ge=0, le=10)
    tempo: str | None = None
    recommended_weight: float | None = None
    notes: str | None = None
    superset_group: str | None = None
    superset_order: int | None = None

    # Kept for budgeting and naming, never serialized.
    category: ExerciseCategory | None = Field(None, exclude=True)
    movement_pattern: MovementPattern | None = Field(None, exclude=True)
    role: ExerciseRole | None = Field(None, exclude=True)


class GeneratedWorkout(BaseModel):
    day_index: int = Field(..., ge=1)
    name: str
    workout_type: WorkoutType = WorkoutType.strength
    focus: DayFocus
    movement_focus: list[MovementPattern] = Field(default_factory=list)
    cardio_type: CardioType | None = None
    scheduled_date: date | None = None
    day_of_week: int | None = Field(None, ge=1, le=7)
    estimated_strength_minutes: float = 0.0
    strength_budget_minutes: float = 0.0
    exercises: list[GeneratedExercise] = Field(default_factory=list)


class GeneratedProgram(BaseModel):
    template_id: str
    template_name: str
    program_type: str
    weekly_structure: str
    duration_weeks: int = Field(default=4, ge=1)
    days_per_week: int
    session_minutes: int
    workouts: list[GeneratedWorkout] = Field(default_factory=list)


class ProgramGenerationRequest(BaseModel):
    profile: UserProfile
    assessment: Assessment | None = None
    catalog: list[Exercise] | None = Field(None, description="Falls back to the bundled catalog when omitted")
