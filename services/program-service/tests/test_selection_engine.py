import pytest

from program_service.schemas import Difficulty, ExerciseRole, MovementPattern
from program_service.services.ability_model import build_ability_model
from program_service.services.exercise_index import build_exercise_index
from program_service.services.generation_context import DaySelection, GenerationContext
from program_service.services.selection_engine import (
    DayTheme,
    SelectionEngine,
    classify_day_theme,
    score_isolation,
)
from program_service.services.template_selector import select_program_template
from program_service.services.time_budget import allocate_minutes, plan_counts
from program_service.services.weekly_distribution import normalize_frequency, plan_day


def build_engine(catalog, profile, assessment=None):
    ability = build_ability_model(profile, assessment)
    index = build_exercise_index(catalog, profile.equipment, ability)
    template = select_program_template(profile.nutrition_goal)
    counts = plan_counts(allocate_minutes(profile.nutrition_goal, profile.session_minutes), ability.experience, template)
    context = GenerationContext(days_per_week=normalize_frequency(profile.days_per_week))
    return SelectionEngine(index, ability, context, counts)


def test_compound_pattern_needs_a_day_between(catalog, make_profile, exercise_by_name):
    engine = build_engine(catalog, make_profile())
    engine.admit(DaySelection(plan=plan_day(3, 1)), exercise_by_name("Goblet Squat"))

    assert not engine.can_use(exercise_by_name("Dumbbell Squat"), DaySelection(plan=plan_day(3, 2)))
    assert engine.can_use(exercise_by_name("Dumbbell Squat"), DaySelection(plan=plan_day(3, 3)))


def test_last_day_never_repeats_day_one(catalog, make_profile, exercise_by_name):
    engine = build_engine(catalog, make_profile())
    engine.admit(DaySelection(plan=plan_day(3, 1)), exercise_by_name("Goblet Squat"))

    assert not engine.can_use(exercise_by_name("Goblet Squat"), DaySelection(plan=plan_day(3, 3)))


def test_core_and_power_used_once_per_week(catalog, make_profile, exercise_by_name):
    engine = build_engine(catalog, make_profile(days_per_week=5))
    day1 = DaySelection(plan=plan_day(5, 1))
    engine.admit(day1, exercise_by_name("Plank"))
    engine.admit(day1, exercise_by_name("Jump Squat"))

    day4 = DaySelection(plan=plan_day(5, 4))
    assert not engine.can_use(exercise_by_name("Plank"), day4)
    assert not engine.can_use(exercise_by_name("Jump Squat"), day4)
    assert engine.can_use(exercise_by_name("Dead Bug"), day4)


def test_isolation_muscles_not_hit_twice_in_a_day(catalog, make_profile, exercise_by_name):
    engine = build_engine(catalog, make_profile())
    day1 = DaySelection(plan=plan_day(3, 1))
    engine.admit(day1, exercise_by_name("Dumbbell Biceps Curl"))

    assert "biceps" in day1.accessory_muscles
    assert not engine.can_use(exercise_by_name("Hammer Curl"), day1)
    assert engine.can_use(exercise_by_name("Lateral Raise"), day1)


def test_isolation_respects_previous_day_muscles(catalog, make_profile, exercise_by_name):
    engine = build_engine(catalog, make_profile())
    engine.context.roll_day({"side_delts"}, rest_day_follows=False)
    day2 = DaySelection(plan=plan_day(3, 2))

    assert not engine.can_use(exercise_by_name("Lateral Raise"), day2)

    engine.context.roll_day({"side_delts"}, rest_day_follows=True)
    assert engine.can_use(exercise_by_name("Lateral Raise"), day2)


def test_isolation_needs_a_day_between_uses(catalog, make_profile, exercise_by_name):
    engine = build_engine(catalog, make_profile())
    engine.admit(DaySelection(plan=plan_day(3, 1)), exercise_by_name("Lateral Raise"))

    assert not engine.can_use(exercise_by_name("Lateral Raise"), DaySelection(plan=plan_day(3, 2)))


def test_day_one_places_required_movements(catalog, make_profile):
    engine = build_engine(catalog, make_profile())
    selection = engine.select_day(plan_day(3, 1))

    required = {item.exercise.name: item for item in selection.compounds if item.required}
    assert set(required) == {"Goblet Squat", "Push-Up", "Dumbbell Row"}
    assert required["Goblet Squat"].role is ExerciseRole.primary
    assert required["Push-Up"].role is ExerciseRole.primary
    assert required["Dumbbell Row"].role is ExerciseRole.secondary
    assert engine.context.required_placed == {"Goblet Squat", "Push-Up", "Dumbbell Row"}


def test_required_movement_falls_back_to_alternative(catalog, make_profile):
    engine = build_engine(catalog, make_profile(equipment=[]))
    selection = engine.select_day(plan_day(3, 1))

    required = {item.exercise.name for item in selection.compounds if item.required}
    assert "Bodyweight Box Squat" in required
    assert "Push-Up" in required
    assert "Goblet Squat" in engine.context.required_placed

def test_isolation_may_rehit_compound_muscles(catalog, make_profile, exercise_by_name):
    engine = build_engine(catalog, make_profile())
    day1 = DaySelection(plan=plan_day(3, 1))
    engine.admit(day1, exercise_by_name("Push-Up"))

    assert "triceps" in day1.heavy_muscles
    assert engine.can_use(exercise_by_name("Triceps Kickback"), day1)

    engine.admit(day1, exercise_by_name("Overhead Triceps Extension"))
    assert not engine.can_use(exercise_by_name("Triceps Kickback"), day1)


def test_core_day_gets_core_work(catalog, make_profile):
    engine = build_engine(catalog, make_profile())
    selection = engine.select_day(plan_day(3, 1))

    assert any(item.exercise.movement_pattern is MovementPattern.core for item in selection.core)


def test_week_stays_within_compound_cap(catalog, make_profile):
    engine = build_engine(catalog, make_profile())

    for day in range(1, 4):
        selection = engine.select_day(plan_day(3, day))
        assert 1 <= len(selection.compounds) <= engine.compound_cap
        assert len(selection.isolations) <= engine.counts.isolation
        assert len(selection.cardio) <= engine.counts.cardio
        engine.context.roll_day(selection.heavy_muscles, rest_day_follows=True)


def test_missing_slots_are_recorded(make_profile, exercise_by_name):
    engine = build_engine([exercise_by_name("Plank")], make_profile())
    selection = engine.select_day(plan_day(3, 1))

    assert [item.exercise.name for item in selection.core] == ["Plank"]
    assert selection.unfilled["compound"] == engine.compound_slots
    assert selection.unfilled["isolation"] == engine.counts.isolation
    assert selection.unfilled["cardio"] == engine.counts.cardio


def test_fill_time_gap_adds_secondary_compounds_up_to_cap(catalog, make_profile):
    engine = build_engine(catalog, make_profile())
    selection = DaySelection(plan=plan_day(3, 1))

    added = engine.fill_time_gap(selection, 0.0, 30.0, 5.0, 3.0)

    assert added == engine.compound_cap
    assert all(item.role is ExerciseRole.secondary for item in selection.compounds)
    assert len({item.exercise.movement_pattern for item in selection.compounds}) == added


def test_compound_phase_leaves_room_for_gap_fill(catalog, make_profile):
    engine = build_engine(catalog, make_profile())
    selection = engine.select_day(plan_day(3, 1))

    assert engine.compound_slots < engine.compound_cap
    assert len(selection.compounds) == engine.compound_slots
    assert engine.fill_time_gap(selection, 0.0, 39.0, 4.75, 3.0) == engine.compound_cap - engine.compound_slots
    assert selection.compounds[-1].role is ExerciseRole.secondary


@pytest.mark.parametrize("difficulty, placed", [(Difficulty.intermediate, True), (Difficulty.advanced, False)])
def test_required_movement_stretches_one_level(make_profile, exercise_by_name, difficulty, placed):
    goblet = exercise_by_name("Goblet Squat").model_copy(update={"difficulty": difficulty})
    engine = build_engine([goblet], make_profile())
    selection = engine.select_day(plan_day(3, 1))

    names = [item.exercise.name for item in selection.compounds]
    assert names == (["Goblet Squat"] if placed else [])
    assert all(item.required for item in selection.compounds)
    assert ("Goblet Squat" in engine.context.required_placed) is placed


def test_fill_time_gap_ignores_small_gaps(catalog, make_profile):
    engine = build_engine(catalog, make_profile())
    selection = DaySelection(plan=plan_day(3, 1))

    assert engine.fill_time_gap(selection, 28.0, 30.0, 5.0, 3.0) == 0
    assert selection.compounds == []


def test_classify_day_theme():
    assert classify_day_theme([MovementPattern.horizontal_push, MovementPattern.vertical_push]) is DayTheme.push
    assert classify_day_theme([MovementPattern.squat, MovementPattern.hinge, MovementPattern.core]) is DayTheme.leg
    assert classify_day_theme([MovementPattern.horizontal_push, MovementPattern.horizontal_pull]) is DayTheme.mixed
    assert classify_day_theme([]) is DayTheme.mixed


def test_score_isolation(exercise_by_name):
    curl = exercise_by_name("Dumbbell Biceps Curl")

    assert score_isolation(curl, set()) == 100
    assert score_isolation(curl, {"triceps"}) == 160
    assert score_isolation(curl, {"biceps"}) == 40
