from fastapi import Depends

from .config import Settings, get_settings
from .exceptions import CatalogUnavailableException
from .schemas import Exercise
from .services.catalog import load_catalog


def get_catalog(settings: Settings = Depends(get_settings)) -> tuple[Exercise, ...]:
    try:
        return load_catalog(settings.PROGRAM_CATALOG_PATH)
    except RuntimeError as exc:
        raise CatalogUnavailableException(str(exc)) from exc
