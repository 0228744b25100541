# Utils module
from utils.logger import logger, get_logger
from utils.helpers import (
    normalize_keyword,
    entity_key,
    safe_float,
    safe_int,
    safe_count,
    clamp,
    round_half_up,
    format_percentage
)
from utils.validators import (
    ValidationError,
    validate_url,
    validate_row_values,
    validate_threshold
)

__all__ = [
    'logger',
    'get_logger',
    'normalize_keyword',
    'entity_key',
    'safe_float',
    'safe_int',
    'safe_count',
    'clamp',
    'round_half_up',
    'format_percentage',
    'ValidationError',
    'validate_url',
    'validate_row_values',
    'validate_threshold'
]
