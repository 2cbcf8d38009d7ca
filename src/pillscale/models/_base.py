"""Base model and enum for pillscale records.

Every pillscale record inherits from :class:`ScaleBaseModel` which
provides:

* ``alias_generator=to_camel`` so persisted records use the camelCase
  keys written by the mobile dashboard, while Python code uses
  snake_case fields.
* A ``model_validator(mode="before")`` that drops empty strings and NaN
  so the field default is used instead.

Firmware code enums inherit from :class:`ScaleEnum` which adds an
``UNKNOWN`` member at ``-1`` and a ``_missing_`` hook that returns
``UNKNOWN`` for any value without a mapped member.
"""

from __future__ import annotations

import enum
import math
from datetime import UTC, datetime
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, model_validator
from pydantic.alias_generators import to_camel


def ensure_utc(value: Any) -> Any:
    """Attach UTC to naive datetimes; leave everything else to pydantic."""
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


UtcDatetime = Annotated[datetime, BeforeValidator(ensure_utc)]
"""Annotated type that treats naive datetimes as UTC."""


class ScaleEnum(enum.IntEnum):
    """Firmware code enum that tolerates codes newer than this library.

    Subclasses declare ``UNKNOWN = -1``; looking up an unmapped code
    returns it.
    """

    @classmethod
    def _missing_(cls, value: object) -> ScaleEnum:
        if hasattr(cls, "UNKNOWN"):
            unknown: ScaleEnum = cls.UNKNOWN  # type: ignore[attr-defined]
            return unknown
        return next(iter(cls))


class ScaleBaseModel(BaseModel):
    """Base for immutable pillscale records.

    Handles:
    * camelCase <-> snake_case via ``alias_generator=to_camel``
    * empty strings and NaN -> dropped so the field default is used
    """

    model_config = ConfigDict(
        frozen=True,
        extra="ignore",
        populate_by_name=True,
        alias_generator=to_camel,
    )

    @staticmethod
    def _clean_dict(values: dict[str, Any]) -> dict[str, Any]:
        cleaned: dict[str, Any] = {}
        for key, value in values.items():
            if value is None:
                continue
            if isinstance(value, str) and not value.strip():
                continue
            if isinstance(value, float) and math.isnan(value):
                continue
            cleaned[key] = value
        return cleaned

    @model_validator(mode="before")
    @classmethod
    def _clean_values(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        return ScaleBaseModel._clean_dict(values)
