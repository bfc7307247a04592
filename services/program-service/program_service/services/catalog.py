import json
from functools import lru_cache
from pathlib import Path

import structlog
from pydantic import TypeAdapter, ValidationError

from ..schemas import Exercise

logger = structlog.get_logger(__name__)

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / ".." / "exercise_catalog.json"

_CATALOG_ADAPTER = TypeAdapter(list[Exercise])


@lru_cache(maxsize=8)
def load_catalog(path: str | None = None) -> tuple[Exercise, ...]:
    """Load and validate a catalog file. The result is cached per path and never mutated."""
    catalog_path = Path(path) if path else DEFAULT_CATALOG_PATH
    try:
        with open(catalog_path, encoding="utf-8") as f:
            raw = json.load(f)
        exercises = _CATALOG_ADAPTER.validate_python(raw)
    except FileNotFoundError as e:
        logger.error("exercise_catalog_missing", path=str(catalog_path))
        raise RuntimeError(f"Exercise catalog not found at {catalog_path}") from e
    except json.JSONDecodeError as e:
        logger.error("exercise_catalog_invalid_json", path=str(catalog_path), error=str(e))
        raise RuntimeError(f"Invalid JSON in exercise catalog: {e}") from e
    except ValidationError as e:
        logger.error("exercise_catalog_invalid_rows", path=str(catalog_path), errors=e.error_count())
        raise RuntimeError(f"Invalid exercise catalog rows: {e.error_count()} errors") from e

    seen: set[str] = set()
    for exercise in exercises:
        if exercise.id in seen:
            raise RuntimeError(f"Duplicate exercise id in catalog: {exercise.id}")
        seen.add(exercise.id)

    logger.info("exercise_catalog_loaded", path=str(catalog_path), exercises=len(exercises))
    return tuple(exercises)
