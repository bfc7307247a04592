from __future__ import annotations

from dataclasses import dataclass

import structlog

from ..schemas import CardioType, ExperienceLevel, NutritionGoal

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class ProgramTemplate:
    id: str
    name: str
    description: str
    strength_focus: int
    cardio_focus: int
    cardio_placement: str  # finisher | dedicated_days
    cardio_exercises: int
    strength_rpe: tuple[int, int]
    strength_rir: tuple[int, int]
    cardio_intensity: str  # low | moderate | high | varied
    experience_levels: tuple[ExperienceLevel, ...] = tuple(ExperienceLevel)

    @property
    def weekly_structure(self) -> str:
        placement = "cardio finisher" if self.cardio_placement == "finisher" else "conditioning-heavy days"
        return f"{self.strength_focus}% strength / {self.cardio_focus}% cardio, {placement}"


STRENGTH_PRIMARY = ProgramTemplate(
    id="strength-primary",
    name="Strength Primary",
    description="Heavy compound lifts with progressive overload. Cardio kept to a short finisher.",
    strength_focus=80,
    cardio_focus=20,
    cardio_placement="finisher",
    cardio_exercises=1,
    strength_rpe=(7, 9),
    strength_rir=(1, 3),
    cardio_intensity="moderate",
)

CARDIO_PRIMARY = ProgramTemplate(
    id="cardio-primary",
    name="Cardio Primary",
    description="Conditioning focus. Strength work for maintenance and injury prevention.",
    strength_focus=30,
    cardio_focus=70,
    cardio_placement="dedicated_days",
    cardio_exercises=3,
    strength_rpe=(6, 8),
    strength_rir=(2, 4),
    cardio_intensity="high",
)

HYBRID_BALANCE = ProgramTemplate(
    id="hybrid-balance",
    name="Hybrid Balance",
    description="Strength-focused training with cardio finishers for general fitness.",
    strength_focus=70,
    cardio_focus=30,
    cardio_placement="finisher",
    cardio_exercises=1,
    strength_rpe=(7, 8),
    strength_rir=(2, 3),
    cardio_intensity="moderate",
)

PROGRAM_TEMPLATES: dict[str, ProgramTemplate] = {
    template.id: template for template in (STRENGTH_PRIMARY, CARDIO_PRIMARY, HYBRID_BALANCE)
}

STRENGTH_KEYWORDS = ("gain", "build", "bulk", "grow", "hypertrophy", "muscle", "strength", "mass")
LOSS_KEYWORDS = ("lose", "loss", "cut", "shred", "drop")
ENDURANCE_KEYWORDS = ("endurance", "cardio", "conditioning", "run", "marathon", "stamina")

# Cardio type sequence per template flavour, indexed by day.
CARDIO_ROTATIONS: dict[str, tuple[CardioType, ...]] = {
    "high": (CardioType.hiit, CardioType.metabolic_circuits, CardioType.tempo, CardioType.steady_state),
    "strength-primary": (CardioType.steady_state, CardioType.zone_2, CardioType.hiit),
    "moderate": (CardioType.zone_2, CardioType.hiit, CardioType.steady_state),
    "low": (CardioType.zone_2, CardioType.steady_state),
    "varied": tuple(CardioType),
}


def select_program_template(
    goal: NutritionGoal | str | None,
    experience: ExperienceLevel | None = None,
) -> ProgramTemplate:
    """Priority: strength words, then loss words, then endurance words, else hybrid."""
    normalized = (goal.value if isinstance(goal, NutritionGoal) else (goal or "maintain")).strip().lower()

    if any(keyword in normalized for keyword in STRENGTH_KEYWORDS):
        template = STRENGTH_PRIMARY
    elif any(keyword in normalized for keyword in LOSS_KEYWORDS + ENDURANCE_KEYWORDS):
        template = CARDIO_PRIMARY
    else:
        template = HYBRID_BALANCE

    if experience is not None and experience not in template.experience_levels:
        logger.info("program_template_experience_mismatch", template=template.id, experience=experience.value)
        template = HYBRID_BALANCE
    return template


def cardio_type_for_day(template: ProgramTemplate, day_index: int) -> CardioType:
    rotation = CARDIO_ROTATIONS.get(template.id) or CARDIO_ROTATIONS.get(template.cardio_intensity)
    if not rotation:
        rotation = CARDIO_ROTATIONS["moderate"]
    return rotation[(day_index - 1) % len(rotation)]
