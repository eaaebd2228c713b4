"""Rating dimensions shared by every chart.

A dimension is a cross-entity rating axis. Each entity type reads it from a
different canonical column, or not at all: airlines carry no cleanliness
rating and airports no comfort rating. ``None`` in the table means "not
applicable" and must be checked with :func:`has_data` before reading means.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional, Tuple, Union

from review_core.errors import UnknownDimensionError
from review_core.normalize import OVERALL_FIELD, check_entity_type, rating_multiplier


@dataclass(frozen=True)
class FieldSpec:
    """Canonical rating column for one (dimension, entity type) pair.

    ``multiplier`` is the native-to-0-10 factor. ``normalize_reviews`` has
    already applied it, so consumers read ``field`` as is.
    """

    field: str
    multiplier: float


@dataclass(frozen=True)
class Dimension:
    key: str
    label: str
    airline: Optional[FieldSpec]
    airport: Optional[FieldSpec]
    lounge: Optional[FieldSpec]

    def field_for(self, entity_type: str) -> Optional[FieldSpec]:
        return getattr(self, check_entity_type(entity_type))

    def has_any_data(self) -> bool:
        return any(spec is not None for spec in (self.airline, self.airport, self.lounge))


def _spec(entity_type: str, field: str) -> FieldSpec:
    multiplier = rating_multiplier(entity_type, field)
    if multiplier is None:
        raise ValueError(f"{field!r} is not a rating column for {entity_type}")
    return FieldSpec(field=field, multiplier=multiplier)


DIMENSIONS: Tuple[Dimension, ...] = (
    Dimension(
        key="comfort",
        label="Comfort",
        airline=_spec("airline", "seat_comfort_rating"),
        airport=None,
        lounge=_spec("lounge", "comfort_rating"),
    ),
    Dimension(
        key="staff",
        label="Staff",
        airline=_spec("airline", "cabin_staff_rating"),
        airport=_spec("airport", "airport_staff_rating"),
        lounge=_spec("lounge", "staff_service_rating"),
    ),
    Dimension(
        key="food",
        label="Food",
        airline=_spec("airline", "food_beverages_rating"),
        airport=_spec("airport", "food_beverages_rating"),
        lounge=_spec("lounge", "catering_rating"),
    ),
    Dimension(
        key="cleanliness",
        label="Cleanliness",
        airline=None,
        airport=_spec("airport", "terminal_cleanliness_rating"),
        lounge=_spec("lounge", "cleanliness_rating"),
    ),
    Dimension(
        key="overall",
        label="Overall",
        airline=_spec("airline", OVERALL_FIELD),
        airport=_spec("airport", OVERALL_FIELD),
        lounge=_spec("lounge", OVERALL_FIELD),
    ),
)

DIMENSIONS_BY_KEY: Dict[str, Dimension] = {d.key: d for d in DIMENSIONS}


def get_dimension(key: str) -> Dimension:
    try:
        return DIMENSIONS_BY_KEY[key]
    except KeyError:
        raise UnknownDimensionError(f"Unknown dimension {key!r}; expected one of {', '.join(DIMENSIONS_BY_KEY)}") from None


def as_dimension(value: Union[Dimension, str, None]) -> Optional[Dimension]:
    if value is None or isinstance(value, Dimension):
        return value
    return get_dimension(str(value))


def resolve(dimension_key: str, entity_type: str) -> Optional[FieldSpec]:
    return get_dimension(dimension_key).field_for(entity_type)


def has_data(dimension_key: str, entity_type: str) -> bool:
    return resolve(dimension_key, entity_type) is not None


def rating_column(dimension: Union[Dimension, str, None], entity_type: str) -> Optional[str]:
    """Canonical column a chart reads for ``entity_type``.

    No active dimension means the entity's own overall rating.
    """
    dim = as_dimension(dimension)
    if dim is None:
        check_entity_type(entity_type)
        return OVERALL_FIELD
    spec = dim.field_for(entity_type)
    return spec.field if spec is not None else None
