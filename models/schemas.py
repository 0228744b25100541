"""
Boundary schemas.

Decodes untyped JSON from the data-fetch layer (Search Console style
reports, SERP competitor crawls, keyword data providers) into the typed
engine value objects. Nothing untyped gets past this module.
"""

from typing import Any, Dict, List, Optional, Union
from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    ValidationError as PydanticValidationError,
    field_validator
)

from models.entities import Benchmark, KeywordDifficultyInput, PerformanceRow
from utils.logger import get_logger
from utils.validators import ValidationError, validate_url

log = get_logger("schemas")


class PerformanceRowSchema(BaseModel):
    """One reporting row after the entity has been resolved."""
    model_config = ConfigDict(extra='ignore')

    entity: str = Field(min_length=1)
    clicks: float = Field(ge=0, allow_inf_nan=False)
    impressions: float = Field(ge=0, allow_inf_nan=False)
    ctr: float = Field(default=0.0, ge=0, le=1, allow_inf_nan=False)
    position: float = Field(ge=1, allow_inf_nan=False)

    @field_validator('entity')
    @classmethod
    def strip_entity(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError('entity cannot be blank')
        return v

    def to_row(self) -> PerformanceRow:
        return PerformanceRow(
            entity=self.entity,
            clicks=self.clicks,
            impressions=self.impressions,
            ctr=self.ctr,
            position=self.position
        )


class BenchmarkSchema(BaseModel):
    """Competitor averages from a SERP crawl."""
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    avg_domain_authority: float = Field(
        default=0.0, ge=0, le=100, alias='avgDomainAuthority',
        allow_inf_nan=False
    )
    avg_backlinks: int = Field(default=0, ge=0, alias='avgBacklinks')
    avg_content_length: int = Field(default=0, ge=0, alias='avgContentLength')
    top_ranking_pages: int = Field(default=0, ge=0, alias='topRankingPages')

    def to_benchmark(self) -> Benchmark:
        return Benchmark(
            avg_domain_authority=self.avg_domain_authority,
            avg_backlinks=self.avg_backlinks,
            avg_content_length=self.avg_content_length,
            top_ranking_pages=self.top_ranking_pages
        )


class KeywordDataSchema(BaseModel):
    """Keyword demand and competition from a keyword data provider."""
    model_config = ConfigDict(extra='ignore', populate_by_name=True)

    keyword: str = Field(min_length=1)
    search_volume: int = Field(default=0, ge=0, alias='searchVolume')
    cpc: float = Field(default=0.0, ge=0, allow_inf_nan=False)
    competition: float = Field(default=0.0, ge=0, le=1, allow_inf_nan=False)

    @field_validator('search_volume', 'cpc', 'competition', mode='before')
    @classmethod
    def none_to_zero(cls, v: Any) -> Any:
        # Providers send null for keywords without data
        return 0 if v is None else v

    def to_input(self) -> KeywordDifficultyInput:
        return KeywordDifficultyInput(
            keyword=self.keyword,
            search_volume=self.search_volume,
            cpc=self.cpc,
            competition=self.competition
        )


def _resolve_entity(
    raw: Dict[str, Any],
    dimension: Union[str, int],
    dimensions: Optional[List[str]]
) -> Any:
    """Pick the entity out of a raw row."""
    if 'keys' not in raw:
        if isinstance(dimension, str) and raw.get(dimension) is not None:
            return raw[dimension]
        return raw.get('entity')

    keys = raw.get('keys') or []
    if isinstance(dimension, int):
        index = dimension
    else:
        if not dimensions and len(keys) > 1:
            raise ValidationError(
                f"Report rows carry {len(keys)} keys; pass dimensions "
                f"to locate '{dimension}'"
            )
        order = list(dimensions) if dimensions else [dimension]
        if dimension not in order:
            raise ValidationError(
                f"Dimension '{dimension}' not in report dimensions {order}"
            )
        index = order.index(dimension)

    if index >= len(keys):
        return None
    return keys[index]


def _to_validation_error(
    exc: PydanticValidationError,
    context: str
) -> ValidationError:
    errors = exc.errors()
    first = errors[0] if errors else {}
    location = '.'.join(str(part) for part in first.get('loc', ()))
    message = f"Invalid {context}: {location} {first.get('msg', '')}".strip()
    return ValidationError(message, errors)


def parse_performance_rows(
    payload: Union[Dict[str, Any], List[Dict[str, Any]]],
    dimension: Union[str, int] = 'query',
    dimensions: Optional[List[str]] = None
) -> List[PerformanceRow]:
    """
    Parse a reporting payload into performance rows.

    Args:
        payload: Either a list of row dicts or a Search Console style
            document with a ``rows`` list (each row carrying ``keys``)
        dimension: Dimension to use as entity, by name or key index
        dimensions: Dimension order of the ``keys`` arrays; defaults to
            ``[dimension]`` and is required by name when rows carry
            several keys

    Returns:
        List of validated PerformanceRow

    Raises:
        ValidationError: If the payload or any row is malformed
    """
    if isinstance(payload, dict):
        raw_rows = payload.get('rows', [])
    else:
        raw_rows = payload

    if raw_rows is None:
        return []
    if not isinstance(raw_rows, list):
        raise ValidationError(
            f"Expected a list of rows, got {type(raw_rows).__name__}"
        )

    rows = []
    for i, raw in enumerate(raw_rows):
        if not isinstance(raw, dict):
            raise ValidationError(
                f"Row {i} must be an object, got {type(raw).__name__}"
            )

        entity = _resolve_entity(raw, dimension, dimensions)
        data = dict(raw)
        data['entity'] = entity

        try:
            schema = PerformanceRowSchema.model_validate(data)
        except PydanticValidationError as exc:
            raise _to_validation_error(exc, f"row {i}") from exc

        if dimension == 'page':
            is_valid, error = validate_url(schema.entity)
            if not is_valid:
                raise ValidationError(f"Row {i}: {error} ({schema.entity})")

        rows.append(schema.to_row())

    log.debug(f"Parsed {len(rows)} performance rows by {dimension}")
    return rows


def parse_benchmark(payload: Dict[str, Any]) -> Benchmark:
    """
    Parse competitor benchmark data.

    Args:
        payload: Raw benchmark dict (camelCase or snake_case keys)

    Returns:
        Benchmark

    Raises:
        ValidationError: If the payload is malformed
    """
    if not isinstance(payload, dict):
        raise ValidationError(
            f"Benchmark must be an object, got {type(payload).__name__}"
        )
    try:
        return BenchmarkSchema.model_validate(payload).to_benchmark()
    except PydanticValidationError as exc:
        raise _to_validation_error(exc, "benchmark") from exc


def parse_keyword_data(payload: Dict[str, Any]) -> KeywordDifficultyInput:
    """
    Parse keyword demand data.

    Args:
        payload: Raw keyword dict (camelCase or snake_case keys)

    Returns:
        KeywordDifficultyInput

    Raises:
        ValidationError: If the payload is malformed
    """
    if not isinstance(payload, dict):
        raise ValidationError(
            f"Keyword data must be an object, got {type(payload).__name__}"
        )
    try:
        return KeywordDataSchema.model_validate(payload).to_input()
    except PydanticValidationError as exc:
        raise _to_validation_error(exc, "keyword data") from exc
