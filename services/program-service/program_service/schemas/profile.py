from datetime import date
from enum import Enum

from pydantic import BaseModel, Field

from .exercise import Difficulty


class NutritionGoal(str, Enum):
    gain = "gain"
    maintain = "maintain"
    lose = "lose"


class ExperienceLevel(str, Enum):
    beginner = "beginner"
    intermediate = "intermediate"
    advanced = "advanced"


class UnitPreference(str, Enum):
    imperial = "imperial"
    metric = "metric"


class UserProfile(BaseModel):
    equipment: list[str] = Field(default_factory=list, description="Owned equipment; bodyweight is always implied")
    experience_level: ExperienceLevel = ExperienceLevel.beginner
    nutrition_goal: NutritionGoal = NutritionGoal.maintain
    unit_preference: UnitPreference = UnitPreference.imperial
    session_minutes: int = Field(default=60, ge=10, le=180)
    days_per_week: int = Field(default=3, ge=1, le=7)
    selected_dates: list[date] | None = Field(None, description="Explicit calendar dates for the week")
    selected_days: list[int] | None = Field(None, description="ISO weekdays, 1 = Monday")
    body_weight: float | None = Field(None, gt=0, description="In the user's preferred unit")


class Assessment(BaseModel):
    experience_level: ExperienceLevel | None = None

    pushups: int | None = Field(None, ge=0)
    pike_pushups: int | None = Field(None, ge=0)
    pullups: int | None = Field(None, ge=0)
    squats: int | None = Field(None, ge=0)
    walking_lunges: int | None = Field(None, ge=0)
    single_leg_rdl: int | None = Field(None, ge=0)
    plank_hold: int | None = Field(None, ge=0, description="Seconds")
    mile_time: float | None = Field(None, gt=0, description="Minutes")

    squat_1rm: float | None = Field(None, ge=0)
    deadlift_1rm: float | None = Field(None, ge=0)
    bench_press_1rm: float | None = Field(None, ge=0)
    overhead_press_1rm: float | None = Field(None, ge=0)
    barbell_row_1rm: float | None = Field(None, ge=0)
    dumbbell_lunge_1rm: float | None = Field(None, ge=0)
    farmers_carry_1rm: float | None = Field(None, ge=0)

    horizontal_push_override: Difficulty | None = None
    vertical_push_override: Difficulty | None = None
    vertical_pull_override: Difficulty | None = None
    horizontal_pull_override: Difficulty | None = None
    lower_body_override: Difficulty | None = None
    hinge_override: Difficulty | None = None
    core_override: Difficulty | None = None
    rotation_override: Difficulty | None = None
    carry_override: Difficulty | None = None
    cardio_override: Difficulty | None = None
