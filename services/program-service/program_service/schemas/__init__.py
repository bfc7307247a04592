# This file makes the schemas directory a Python package

from .exercise import (
    DIFFICULTY_ORDER,
    STRENGTH_PATTERNS,
    Difficulty,
    Exercise,
    ExerciseCategory,
    MovementPattern,
    TrackingType,
    difficulty_rank,
)
from .profile import Assessment, ExperienceLevel, NutritionGoal, UnitPreference, UserProfile
from .program import (
    STRENGTH_ROLES,
    CardioType,
    DayFocus,
    ExerciseRole,
    GeneratedExercise,
    GeneratedProgram,
    GeneratedWorkout,
    ProgramGenerationRequest,
    WorkoutType,
)
