import pytest

from program_service.schemas import CardioType, NutritionGoal
from program_service.services.template_selector import (
    CARDIO_PRIMARY,
    HYBRID_BALANCE,
    STRENGTH_PRIMARY,
    cardio_type_for_day,
    select_program_template,
)


@pytest.mark.parametrize(
    "goal, expected",
    [
        (NutritionGoal.gain, STRENGTH_PRIMARY),
        (NutritionGoal.lose, CARDIO_PRIMARY),
        (NutritionGoal.maintain, HYBRID_BALANCE),
        ("build muscle", STRENGTH_PRIMARY),
        ("marathon training", CARDIO_PRIMARY),
        ("cut and gain strength", STRENGTH_PRIMARY),
        (None, HYBRID_BALANCE),
    ],
)
def test_goal_keywords_pick_template(goal, expected):
    assert select_program_template(goal) is expected


def test_cardio_primary_rotation():
    types = [cardio_type_for_day(CARDIO_PRIMARY, day) for day in range(1, 6)]

    assert types == [
        CardioType.hiit,
        CardioType.metabolic_circuits,
        CardioType.tempo,
        CardioType.steady_state,
        CardioType.hiit,
    ]


def test_strength_primary_rotation():
    types = [cardio_type_for_day(STRENGTH_PRIMARY, day) for day in range(1, 4)]

    assert types == [CardioType.steady_state, CardioType.zone_2, CardioType.hiit]


def test_weekly_structure_mentions_split():
    assert STRENGTH_PRIMARY.weekly_structure == "80% strength / 20% cardio, cardio finisher"
    assert CARDIO_PRIMARY.weekly_structure == "30% strength / 70% cardio, conditioning-heavy days"
