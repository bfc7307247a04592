from __future__ import annotations

import math
from dataclasses import dataclass, replace

from ..schemas import (
    Assessment,
    CardioType,
    Difficulty,
    Exercise,
    ExerciseRole,
    GeneratedExercise,
    MovementPattern,
    TrackingType,
    UnitPreference,
    UserProfile,
)
from .generation_context import SelectedExercise
from .template_selector import ProgramTemplate

B, I, A = Difficulty.beginner, Difficulty.intermediate, Difficulty.advanced


@dataclass(frozen=True)
class Prescription:
    sets: int
    reps_min: int | None = None
    reps_max: int | None = None
    duration_seconds: int | None = None
    work_seconds: int | None = None
    rest_seconds: int = 0
    target_rpe: int | None = None
    target_rir: int | None = None
    tempo: str | None = None


SETS: dict[ExerciseRole, dict[Difficulty, int]] = {
    ExerciseRole.warmup: {B: 1, I: 1, A: 1},
    ExerciseRole.power: {B: 3, I: 3, A: 4},
    ExerciseRole.primary: {B: 3, I: 4, A: 4},
    ExerciseRole.secondary: {B: 3, I: 3, A: 4},
    ExerciseRole.isolation: {B: 2, I: 3, A: 3},
    ExerciseRole.core: {B: 2, I: 3, A: 3},
}

REPS: dict[ExerciseRole, dict[Difficulty, tuple[int, int]]] = {
    ExerciseRole.warmup: {B: (8, 10), I: (8, 10), A: (8, 10)},
    ExerciseRole.power: {B: (3, 5), I: (3, 5), A: (3, 5)},
    ExerciseRole.primary: {B: (8, 10), I: (6, 8), A: (4, 6)},
    ExerciseRole.secondary: {B: (8, 12), I: (8, 12), A: (8, 12)},
    ExerciseRole.isolation: {B: (10, 15), I: (10, 15), A: (10, 15)},
    ExerciseRole.core: {B: (10, 15), I: (10, 15), A: (10, 15)},
}

# Hold length for duration-tracked exercises.
HOLD_SECONDS: dict[Difficulty, int] = {B: 30, I: 40, A: 45}

REST_SECONDS: dict[ExerciseRole, dict[Difficulty, int]] = {
    ExerciseRole.warmup: {B: 0, I: 0, A: 0},
    ExerciseRole.power: {B: 90, I: 90, A: 90},
    ExerciseRole.primary: {B: 90, I: 120, A: 150},
    ExerciseRole.secondary: {B: 75, I: 90, A: 90},
    ExerciseRole.isolation: {B: 60, I: 60, A: 60},
    ExerciseRole.core: {B: 45, I: 45, A: 45},
}

DEFAULT_TEMPO: dict[ExerciseRole, str] = {
    ExerciseRole.warmup: "1-0-1-0",
    ExerciseRole.power: "1-0-X-0",
    ExerciseRole.primary: "2-1-1-0",
    ExerciseRole.secondary: "2-0-2-0",
    ExerciseRole.isolation: "2-0-2-0",
    ExerciseRole.core: "2-0-2-0",
}

ROLE_NOTES: dict[ExerciseRole, str] = {
    ExerciseRole.power: "Explosive intent; end the set when speed drops",
    ExerciseRole.primary: "Main lift; add load when every set hits the top of the rep range",
}

CARDIO_PRESCRIPTIONS: dict[CardioType, Prescription] = {
    CardioType.hiit: Prescription(sets=8, work_seconds=30, rest_seconds=30, target_rpe=9),
    CardioType.steady_state: Prescription(sets=1, duration_seconds=600, target_rpe=6),
    CardioType.zone_2: Prescription(sets=1, duration_seconds=900, target_rpe=5),
    CardioType.tempo: Prescription(sets=2, duration_seconds=300, rest_seconds=60, target_rpe=7),
    CardioType.metabolic_circuits: Prescription(sets=6, work_seconds=40, rest_seconds=20, target_rpe=8),
}

CARDIO_NOTES: dict[CardioType, str] = {
    CardioType.hiit: "Work 30s hard, rest 30s",
    CardioType.steady_state: "Conversational pace the whole time",
    CardioType.zone_2: "Easy pace, nasal breathing",
    CardioType.tempo: "Comfortably hard, steady effort",
    CardioType.metabolic_circuits: "Work 40s, rest 20s, keep moving",
}

BEGINNER_RPE_CAP = 8

# (assessment field, equipment the 1RM was measured with)
ONE_RM_SOURCES: dict[MovementPattern, tuple[str, str]] = {
    MovementPattern.squat: ("squat_1rm", "barbell"),
    MovementPattern.hinge: ("deadlift_1rm", "barbell"),
    MovementPattern.horizontal_push: ("bench_press_1rm", "barbell"),
    MovementPattern.vertical_push: ("overhead_press_1rm", "barbell"),
    MovementPattern.horizontal_pull: ("barbell_row_1rm", "barbell"),
    MovementPattern.lunge: ("dumbbell_lunge_1rm", "dumbbells"),
    MovementPattern.carry: ("farmers_carry_1rm", "dumbbells"),
}

# Estimated 1RM as a multiple of body weight when nothing was tested.
DEFAULT_ONE_RM_RATIOS: dict[Difficulty, dict[MovementPattern, float]] = {
    B: {
        MovementPattern.squat: 0.75,
        MovementPattern.hinge: 1.0,
        MovementPattern.horizontal_push: 0.6,
        MovementPattern.vertical_push: 0.4,
        MovementPattern.horizontal_pull: 0.5,
        MovementPattern.lunge: 0.2,
        MovementPattern.carry: 0.4,
    },
    I: {
        MovementPattern.squat: 1.25,
        MovementPattern.hinge: 1.5,
        MovementPattern.horizontal_push: 1.0,
        MovementPattern.vertical_push: 0.6,
        MovementPattern.horizontal_pull: 0.8,
        MovementPattern.lunge: 0.35,
        MovementPattern.carry: 0.6,
    },
    A: {
        MovementPattern.squat: 1.75,
        MovementPattern.hinge: 2.0,
        MovementPattern.horizontal_push: 1.25,
        MovementPattern.vertical_push: 0.75,
        MovementPattern.horizontal_pull: 1.0,
        MovementPattern.lunge: 0.5,
        MovementPattern.carry: 1.0,
    },
}

ROLE_INTENSITY: dict[ExerciseRole, float] = {
    ExerciseRole.primary: 0.75,
    ExerciseRole.secondary: 0.65,
}

# Share of the tested load per implement, keyed by (tested with, prescribed with).
LOAD_FACTORS: dict[tuple[str, str], float] = {
    ("barbell", "barbell"): 1.0,
    ("barbell", "trap_bar"): 1.0,
    ("barbell", "dumbbells"): 0.4,
    ("barbell", "kettlebell"): 0.4,
    ("dumbbells", "dumbbells"): 1.0,
    ("dumbbells", "kettlebell"): 1.0,
}

WEIGHT_STEPS: dict[UnitPreference, float] = {
    UnitPreference.imperial: 5.0,
    UnitPreference.metric: 2.5,
}


def round_to_step(value: float, step: float, mode: str) -> float:
    if step <= 0:
        return value
    ratio = value / step
    if mode == "floor":
        return math.floor(ratio) * step
    if mode == "ceil":
        return math.ceil(ratio) * step
    return round(ratio) * step


def _intensity_targets(
    role: ExerciseRole, template: ProgramTemplate, experience: Difficulty
) -> tuple[int | None, int | None]:
    rpe_low, rpe_high = template.strength_rpe
    rir_low, rir_high = template.strength_rir
    if role is ExerciseRole.primary:
        rpe, rir = rpe_high, rir_low
    elif role is ExerciseRole.secondary:
        rpe, rir = max(rpe_low, rpe_high - 1), min(rir_high, rir_low + 1)
    elif role in (ExerciseRole.isolation, ExerciseRole.power, ExerciseRole.core):
        rpe, rir = rpe_low, rir_high
    else:
        return None, None

    if experience is Difficulty.beginner and rpe > BEGINNER_RPE_CAP:
        rir += rpe - BEGINNER_RPE_CAP
        rpe = BEGINNER_RPE_CAP
    return rpe, rir


def role_prescription(
    role: ExerciseRole,
    experience: Difficulty,
    template: ProgramTemplate,
    tracking_type: TrackingType = TrackingType.reps,
) -> Prescription:
    """Sets, volume, rest and intensity for a non-cardio role."""
    rpe, rir = _intensity_targets(role, template, experience)
    prescription = Prescription(
        sets=SETS[role][experience],
        rest_seconds=REST_SECONDS[role][experience],
        target_rpe=rpe,
        target_rir=rir,
        tempo=DEFAULT_TEMPO[role],
    )
    if tracking_type is TrackingType.duration:
        return replace(prescription, duration_seconds=HOLD_SECONDS[experience], tempo=None)
    reps_min, reps_max = REPS[role][experience]
    return replace(prescription, reps_min=reps_min, reps_max=reps_max)


def cardio_prescription(cardio_type: CardioType) -> Prescription:
    return CARDIO_PRESCRIPTIONS[cardio_type]


def recommended_weight(
    exercise: Exercise,
    equipment: str,
    role: ExerciseRole,
    experience: Difficulty,
    profile: UserProfile,
    assessment: Assessment | None,
) -> float | None:
    intensity = ROLE_INTENSITY.get(role)
    source = ONE_RM_SOURCES.get(exercise.movement_pattern)
    if intensity is None or source is None:
        return None
    field_name, tested_with = source
    factor = LOAD_FACTORS.get((tested_with, equipment.strip().lower()))
    if factor is None:
        return None

    one_rm = getattr(assessment, field_name) if assessment is not None else None
    if not one_rm:
        if not profile.body_weight:
            return None
        one_rm = profile.body_weight * DEFAULT_ONE_RM_RATIOS[experience][exercise.movement_pattern]

    weight = round_to_step(one_rm * intensity * factor, WEIGHT_STEPS[profile.unit_preference], "nearest")
    return weight if weight > 0 else None


class Prescriber:
    """Turns a selected exercise into a GeneratedExercise with its full prescription."""

    def __init__(
        self,
        experience: Difficulty,
        template: ProgramTemplate,
        profile: UserProfile,
        assessment: Assessment | None = None,
    ):
        self.experience = experience
        self.template = template
        self.profile = profile
        self.assessment = assessment

    def prescription_for(self, item: SelectedExercise, cardio_type: CardioType | None = None) -> Prescription:
        if item.role is ExerciseRole.cardio:
            return cardio_prescription(cardio_type or CardioType.steady_state)
        prescription = role_prescription(item.role, self.experience, self.template, item.exercise.tracking_type)
        if item.exercise.recommended_tempo and prescription.tempo is not None:
            prescription = replace(prescription, tempo=item.exercise.recommended_tempo)
        return prescription

    def prescribe(self, item: SelectedExercise, cardio_type: CardioType | None = None) -> GeneratedExercise:
        exercise = item.exercise
        prescription = self.prescription_for(item, cardio_type)
        if item.role is ExerciseRole.cardio:
            notes = CARDIO_NOTES[cardio_type or CardioType.steady_state]
        else:
            notes = ROLE_NOTES.get(item.role)
        return GeneratedExercise(
            exercise_id=exercise.id,
            exercise_name=exercise.name,
            equipment=item.equipment,
            sets=prescription.sets,
            reps_min=prescription.reps_min,
            reps_max=prescription.reps_max,
            duration_seconds=prescription.duration_seconds,
            work_seconds=prescription.work_seconds,
            rest_seconds=prescription.rest_seconds,
            target_rpe=prescription.target_rpe,
            target_rir=prescription.target_rir,
            tempo=prescription.tempo,
            recommended_weight=recommended_weight(
                exercise, item.equipment, item.role, self.experience, self.profile, self.assessment
            ),
            notes=notes,
            category=exercise.category,
            movement_pattern=exercise.movement_pattern,
            role=item.role,
        )
