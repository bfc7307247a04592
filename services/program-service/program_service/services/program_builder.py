from __future__ import annotations

from collections import Counter
from dataclasses import dataclass
from datetime import date

import structlog

from ..config import Settings, get_settings
from ..schemas import ExerciseRole, GeneratedProgram, GeneratedWorkout, ProgramGenerationRequest, UserProfile
from .ability_model import build_ability_model
from .exercise_index import build_exercise_index
from .generation_context import GenerationContext
from .prescription import Prescriber
from .selection_engine import SelectionEngine
from .template_selector import cardio_type_for_day, select_program_template
from .time_budget import allocate_minutes, plan_counts, role_minutes
from .weekly_distribution import SPLIT_NAMES, normalize_frequency, plan_week
from .workout_assembler import WorkoutAssembler

logger = structlog.get_logger(__name__)

# ISO weekdays used when the user picked no days of their own.
DEFAULT_WEEKDAYS: dict[int, tuple[int, ...]] = {
    3: (1, 3, 5),
    4: (1, 2, 4, 5),
    5: (1, 2, 3, 4, 5),
}


@dataclass(frozen=True)
class CalendarSlot:
    day_of_week: int
    position: int  # date ordinal or weekday; consecutive values mean back-to-back days
    scheduled_date: date | None = None


def plan_calendar(profile: UserProfile, frequency: int) -> list[CalendarSlot]:
    dates = sorted(set(profile.selected_dates or []))
    if len(dates) >= frequency:
        return [
            CalendarSlot(day_of_week=day.isoweekday(), position=day.toordinal(), scheduled_date=day)
            for day in dates[:frequency]
        ]

    weekdays = sorted(set(profile.selected_days or []))
    if len(weekdays) == frequency and all(1 <= weekday <= 7 for weekday in weekdays):
        return [CalendarSlot(day_of_week=weekday, position=weekday) for weekday in weekdays]

    if profile.selected_dates or profile.selected_days:
        logger.info(
            "calendar_selection_ignored",
            frequency=frequency,
            selected_dates=len(profile.selected_dates or []),
            selected_days=profile.selected_days,
        )
    return [CalendarSlot(day_of_week=weekday, position=weekday) for weekday in DEFAULT_WEEKDAYS[frequency]]


def rest_day_between(current: CalendarSlot, following: CalendarSlot) -> bool:
    return following.position - current.position > 1


class ProgramBuilder:
    """Runs the day loop for one request and owns its trackers."""

    def __init__(self, request: ProgramGenerationRequest, settings: Settings | None = None):
        self.request = request
        self.settings = settings or get_settings()
        self.unfilled_slots: Counter = Counter()

    def build(self) -> GeneratedProgram:
        profile = self.request.profile
        assessment = self.request.assessment
        catalog = self.request.catalog or []

        frequency = normalize_frequency(profile.days_per_week)
        template = select_program_template(profile.nutrition_goal, profile.experience_level)
        ability = build_ability_model(profile, assessment)
        index = build_exercise_index(catalog, profile.equipment, ability)
        budget = allocate_minutes(profile.nutrition_goal, profile.session_minutes)
        counts = plan_counts(budget, ability.experience, template)

        context = GenerationContext(days_per_week=frequency)
        engine = SelectionEngine(index, ability, context, counts)
        prescriber = Prescriber(ability.experience, template, profile, assessment)
        assembler = WorkoutAssembler(index, engine, prescriber, counts, profile.session_minutes, self.settings)
        compound_minutes = role_minutes(ExerciseRole.secondary, ability.experience, template)
        calendar = plan_calendar(profile, frequency)

        logger.info(
            "program_generation_started",
            frequency=frequency,
            template=template.id,
            experience=ability.experience.value,
            session_minutes=profile.session_minutes,
            catalog_size=len(catalog),
        )

        workouts: list[GeneratedWorkout] = []
        for plan in plan_week(frequency):
            slot = calendar[plan.index - 1]
            cardio_type = cardio_type_for_day(template, plan.index) if counts.cardio else None

            selection = engine.select_day(plan, cardio_type)
            assembler.choose_openers(selection)
            workout = assembler.assemble(selection, budget.strength)
            added = engine.fill_time_gap(
                selection,
                workout.estimated_strength_minutes,
                budget.strength,
                compound_minutes,
                self.settings.PROGRAM_GAP_FILL_THRESHOLD_MINUTES,
            )
            if added:
                workout = assembler.assemble(selection, budget.strength)
            assembler.fit_to_budget(workout, budget.strength)

            workout.scheduled_date = slot.scheduled_date
            workout.day_of_week = slot.day_of_week
            workouts.append(workout)
            self.unfilled_slots.update(selection.unfilled)

            following = calendar[plan.index] if plan.index < frequency else None
            context.roll_day(
                selection.heavy_muscles,
                rest_day_follows=following is not None and rest_day_between(slot, following),
            )

        logger.info(
            "program_generation_finished",
            template=template.id,
            workouts=len(workouts),
            unfilled_slots=dict(self.unfilled_slots),
        )
        return GeneratedProgram(
            template_id=template.id,
            template_name=template.name,
            program_type=SPLIT_NAMES[frequency],
            weekly_structure=f"{frequency} days per week, {template.weekly_structure}",
            duration_weeks=self.settings.PROGRAM_DURATION_WEEKS,
            days_per_week=frequency,
            session_minutes=profile.session_minutes,
            workouts=workouts,
        )


def generate_program(request: ProgramGenerationRequest, settings: Settings | None = None) -> GeneratedProgram:
    return ProgramBuilder(request, settings).build()
