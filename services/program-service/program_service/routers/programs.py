import structlog
from fastapi import APIRouter, Depends

from ..config import Settings, get_settings
from ..dependencies import get_catalog
from ..metrics import (
    PROGRAM_GENERATION_FAILURES_TOTAL,
    PROGRAM_UNFILLED_SLOTS_TOTAL,
    PROGRAM_WORKOUTS_GENERATED_TOTAL,
    PROGRAMS_GENERATED_TOTAL,
)
from ..schemas import Exercise, GeneratedProgram, ProgramGenerationRequest
from ..services.program_builder import ProgramBuilder

logger = structlog.get_logger(__name__)
router = APIRouter()


@router.get("/catalog", response_model=list[Exercise])
def get_bundled_catalog(catalog: tuple[Exercise, ...] = Depends(get_catalog)):
    return list(catalog)


@router.post("/generate", response_model=GeneratedProgram)
def generate_program(
    payload: ProgramGenerationRequest,
    settings: Settings = Depends(get_settings),
):
    if payload.catalog is None:
        catalog = get_catalog(settings)
        payload = payload.model_copy(update={"catalog": list(catalog)})

    builder = ProgramBuilder(payload, settings)
    try:
        program = builder.build()
    except Exception:
        PROGRAM_GENERATION_FAILURES_TOTAL.inc()
        logger.exception(
            "program_generation_failed",
            days_per_week=payload.profile.days_per_week,
            session_minutes=payload.profile.session_minutes,
        )
        raise

    PROGRAMS_GENERATED_TOTAL.labels(template=program.template_id).inc()
    PROGRAM_WORKOUTS_GENERATED_TOTAL.inc(len(program.workouts))
    for slot, missing in builder.unfilled_slots.items():
        PROGRAM_UNFILLED_SLOTS_TOTAL.labels(slot=slot).inc(missing)
    return program
