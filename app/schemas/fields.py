"""Reusable constrained field types and the camelCase base model."""

from __future__ import annotations

from datetime import date
from datetime import time
from typing import Annotated
from typing import Any

from pydantic import BaseModel
from pydantic import BeforeValidator
from pydantic import ConfigDict
from pydantic import Field
from pydantic.alias_generators import to_camel

# Upper bound of the INTEGER key columns.
MAX_ID = 2_147_483_647


class CamelModel(BaseModel):
    """Snake_case in Python, camelCase on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


def _iso_date(value: Any) -> Any:
    if not isinstance(value, (str, date)):
        raise ValueError("must be an ISO date string")
    return value


def _iso_time(value: Any) -> Any:
    if not isinstance(value, (str, time)):
        raise ValueError("must be an ISO time string")
    return value


# JSON bodies must carry real integers; path and query values are coerced.
Priority = Annotated[int, Field(strict=True, ge=0, le=2)]
Status = Annotated[int, Field(strict=True, ge=0, le=3)]
CategoryRef = Annotated[int, Field(strict=True, gt=0, le=MAX_ID)]
EstimatedMinutes = Annotated[int, Field(strict=True, ge=5, le=1440)]
Title = Annotated[str, Field(min_length=3, max_length=100)]
Description = Annotated[str, Field(max_length=1000)]
DueDate = Annotated[date, BeforeValidator(_iso_date)]
DueTime = Annotated[time, BeforeValidator(_iso_time)]

Identifier = Annotated[int, Field(gt=0, le=MAX_ID)]
PriorityFilter = Annotated[int, Field(ge=0, le=2)]
StatusFilter = Annotated[int, Field(ge=0, le=3)]
