from collections import defaultdict
from datetime import date

import pytest

from program_service.schemas import (
    STRENGTH_ROLES,
    DayFocus,
    ExerciseCategory,
    ExerciseRole,
    GeneratedProgram,
)
from program_service.services.exercise_index import owned_equipment
from program_service.services.program_builder import (
    CalendarSlot,
    ProgramBuilder,
    generate_program,
    plan_calendar,
    rest_day_between,
)
from program_service.services.selection_engine import SelectionEngine
from program_service.services.time_budget import allocate_minutes, strength_block_minutes


def _strength(workout):
    return [e for e in workout.exercises if e.role in STRENGTH_ROLES]


def _by_role(workout, *roles):
    return [e for e in workout.exercises if e.role in roles]


@pytest.mark.parametrize("days", [3, 4, 5])
def test_one_workout_per_training_day(make_request, full_kit, days):
    program = generate_program(
        make_request(equipment=full_kit, experience_level="intermediate", nutrition_goal="gain", days_per_week=days)
    )

    assert isinstance(program, GeneratedProgram)
    assert program.days_per_week == days
    assert [w.day_index for w in program.workouts] == list(range(1, days + 1))
    assert all(_strength(w) for w in program.workouts)


@pytest.mark.parametrize("equipment", [[], ["dumbbells"], ["barbell", "bench", "pull_up_bar"]])
def test_every_exercise_uses_owned_equipment(make_request, catalog, equipment):
    by_id = {exercise.id: exercise for exercise in catalog}
    owned = owned_equipment(equipment)
    program = generate_program(make_request(equipment=equipment))

    for workout in program.workouts:
        for exercise in workout.exercises:
            assert exercise.equipment in by_id[exercise.exercise_id].equipment
            assert exercise.equipment in owned


@pytest.mark.parametrize("days", [3, 4, 5])
def test_core_and_power_never_repeat_within_week(make_request, full_kit, days):
    program = generate_program(make_request(equipment=full_kit, experience_level="advanced", days_per_week=days))

    ids = [
        e.exercise_id
        for w in program.workouts
        for e in w.exercises
        if e.category in (ExerciseCategory.core, ExerciseCategory.power)
    ]
    assert len(ids) == len(set(ids))


@pytest.mark.parametrize("days", [3, 4, 5])
def test_compound_patterns_spaced_two_days_apart(make_request, full_kit, days):
    program = generate_program(make_request(equipment=full_kit, experience_level="intermediate", days_per_week=days))

    days_by_pattern = defaultdict(list)
    for workout in program.workouts:
        for exercise in workout.exercises:
            if exercise.category is ExerciseCategory.compound:
                days_by_pattern[exercise.movement_pattern].append(workout.day_index)

    for pattern, used_on in days_by_pattern.items():
        used_on.sort()
        for earlier, later in zip(used_on, used_on[1:]):
            assert later - earlier >= 2, pattern


def test_last_day_never_repeats_day_one(make_request, full_kit):
    program = generate_program(make_request(equipment=full_kit, days_per_week=4))
    first, last = program.workouts[0], program.workouts[-1]

    day_one = {e.exercise_id for e in first.exercises if e.role is not ExerciseRole.warmup}
    final = {e.exercise_id for e in last.exercises if e.role is not ExerciseRole.warmup}
    assert not day_one & final


@pytest.mark.parametrize(
    "experience, goal, days, kit",
    [
        ("beginner", "maintain", 3, False),
        ("intermediate", "gain", 4, True),
        ("advanced", "lose", 5, True),
    ],
)
def test_strength_block_fits_budget(make_request, settings, full_kit, experience, goal, days, kit):
    equipment = full_kit if kit else ["dumbbells"]
    program = generate_program(
        make_request(equipment=equipment, experience_level=experience, nutrition_goal=goal, days_per_week=days),
        settings,
    )
    budget = allocate_minutes(goal, 60).strength

    for workout in program.workouts:
        actual = strength_block_minutes(workout.exercises)
        assert abs(actual - budget) <= settings.PROGRAM_BUDGET_TOLERANCE_MINUTES + 1e-6, workout.name
        assert workout.strength_budget_minutes == pytest.approx(budget, abs=0.01)


def test_beginner_dumbbell_week(make_request, settings):
    program = generate_program(make_request(), settings)
    budget = allocate_minutes("maintain", 60).strength

    assert program.template_id == "hybrid-balance"
    assert program.program_type == "full_body"
    assert program.weekly_structure.startswith("3 days per week")
    assert len(program.workouts) == 3
    for workout in program.workouts:
        warmups = _by_role(workout, ExerciseRole.warmup)
        compounds = _by_role(workout, ExerciseRole.primary, ExerciseRole.secondary)
        assert len(warmups) >= 2
        assert all(w.superset_group and w.superset_group.startswith("W") for w in warmups[:2])
        assert len(_by_role(workout, ExerciseRole.power)) <= 1
        assert 2 <= len(compounds) <= 4
        assert _by_role(workout, ExerciseRole.core, ExerciseRole.isolation)
        assert abs(strength_block_minutes(workout.exercises) - budget) <= 1.0 + 1e-6

    first_day = {e.exercise_name for e in program.workouts[0].exercises}
    assert {"Goblet Squat", "Push-Up", "Dumbbell Row"} <= first_day


def test_short_strength_block_gets_gap_fill_compound(make_request, monkeypatch):
    added = []
    fill_time_gap = SelectionEngine.fill_time_gap

    def recording(self, *args):
        result = fill_time_gap(self, *args)
        added.append(result)
        return result

    monkeypatch.setattr(SelectionEngine, "fill_time_gap", recording)
    program = generate_program(make_request())

    assert added[0] == 1
    first = program.workouts[0]
    secondaries = _by_role(first, ExerciseRole.secondary)
    assert len(_by_role(first, ExerciseRole.primary, ExerciseRole.secondary)) == 4
    assert [e for e in secondaries if e.exercise_name not in {"Goblet Squat", "Push-Up", "Dumbbell Row"}]


def test_advanced_short_sessions_superset_and_rotate_cardio(make_request, full_kit):
    program = generate_program(
        make_request(equipment=full_kit, experience_level="advanced", nutrition_goal="lose", days_per_week=5, session_minutes=45)
    )

    assert program.template_id == "cardio-primary"
    assert program.program_type == "pattern_split"
    assert len({w.focus for w in program.workouts}) == 5
    main_groups = {
        e.superset_group
        for w in program.workouts
        for e in w.exercises
        if e.superset_group and not e.superset_group.startswith("W")
    }
    assert main_groups
    assert len({w.cardio_type for w in program.workouts if w.cardio_type}) >= 2

    for workout in program.workouts:
        for exercise in workout.exercises:
            if exercise.superset_order == 1 and not exercise.superset_group.startswith("W"):
                assert exercise.rest_seconds == 0


def test_long_sessions_do_not_superset_main_work(make_request, full_kit):
    program = generate_program(make_request(equipment=full_kit, session_minutes=60))

    for workout in program.workouts:
        for exercise in workout.exercises:
            if exercise.role is not ExerciseRole.warmup:
                assert exercise.superset_group is None


def test_thirty_minute_sessions_skip_power(make_request, full_kit):
    program = generate_program(make_request(equipment=full_kit, session_minutes=30))

    for workout in program.workouts:
        assert not _by_role(workout, ExerciseRole.power)


def test_beginner_intensity_is_capped(make_request, full_kit):
    program = generate_program(make_request(equipment=full_kit, nutrition_goal="gain"))

    for workout in program.workouts:
        for exercise in workout.exercises:
            if exercise.role is not ExerciseRole.cardio and exercise.target_rpe is not None:
                assert exercise.target_rpe <= 8


def test_tested_one_rm_drives_recommended_weight(make_request, full_kit):
    program = generate_program(
        make_request(
            assessment={"squat_1rm": 300},
            equipment=full_kit,
            experience_level="advanced",
            nutrition_goal="gain",
            days_per_week=5,
            body_weight=180,
        )
    )

    squat = next(e for e in program.workouts[0].exercises if e.exercise_name == "Back Squat")
    assert squat.role is ExerciseRole.primary
    assert squat.recommended_weight == 225.0


def test_generation_is_deterministic_and_trackers_are_fresh(make_request, full_kit):
    request = make_request(equipment=full_kit, experience_level="intermediate", days_per_week=4)

    first = ProgramBuilder(request).build()
    second = ProgramBuilder(request).build()

    assert first.model_dump() == second.model_dump()
    assert "Back Squat" in {e.exercise_name for e in second.workouts[0].exercises}


def test_unsupported_frequency_builds_three_days(make_request):
    program = generate_program(make_request(days_per_week=6))

    assert program.days_per_week == 3
    assert len(program.workouts) == 3


def test_workout_metadata(make_request):
    program = generate_program(make_request())
    first = program.workouts[0]

    assert first.focus is DayFocus.squat
    assert first.name.startswith("Full Body Strength")
    assert first.movement_focus
    assert first.day_of_week == 1


def test_selected_weekdays_are_used(make_request):
    program = generate_program(make_request(selected_days=[2, 4, 6]))

    assert [w.day_of_week for w in program.workouts] == [2, 4, 6]
    assert all(w.scheduled_date is None for w in program.workouts)


def test_selected_dates_are_used(make_request):
    dates = [date(2025, 3, 3), date(2025, 3, 5), date(2025, 3, 7)]
    program = generate_program(make_request(selected_dates=dates))

    assert [w.scheduled_date for w in program.workouts] == dates
    assert [w.day_of_week for w in program.workouts] == [1, 3, 5]


def test_mismatched_selection_uses_default_weekdays(make_profile):
    slots = plan_calendar(make_profile(selected_days=[1, 2]), 3)

    assert [slot.day_of_week for slot in slots] == [1, 3, 5]


def test_rest_day_between():
    monday, tuesday, thursday = (CalendarSlot(day_of_week=d, position=d) for d in (1, 2, 4))

    assert not rest_day_between(monday, tuesday)
    assert rest_day_between(tuesday, thursday)
