import logging
from dataclasses import dataclass

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportConfig:
    batch_size: int
    page_size: int
    delete_chunk_size: int
    organization_code: str = None


def _positive_int(options, key):
    raw = options.get(key)
    try:
        value = int(raw)
    except (TypeError, ValueError):
        raise ImproperlyConfigured(f"RECRUIT_IMPORT['{key}'] must be an integer, got {raw!r}")
    if value <= 0:
        raise ImproperlyConfigured(f"RECRUIT_IMPORT['{key}'] must be positive, got {value}")
    return value


def get_import_config(**overrides):
    """Read and validate the RECRUIT_IMPORT settings, applying non-empty overrides"""
    options = getattr(settings, 'RECRUIT_IMPORT', None)
    if options is None:
        raise ImproperlyConfigured("RECRUIT_IMPORT is not configured in settings")

    options = dict(options)
    options.update({key: value for key, value in overrides.items() if value is not None})

    config = ImportConfig(
        batch_size=_positive_int(options, 'BATCH_SIZE'),
        page_size=_positive_int(options, 'PAGE_SIZE'),
        delete_chunk_size=_positive_int(options, 'DELETE_CHUNK_SIZE'),
        organization_code=options.get('ORGANIZATION_CODE') or None,
    )
    logger.debug(f"Import config: {config}")
    return config
