"""Common models for the PrusaLink client."""

import json
import math
import typing

import pydantic
import structlog

logger = structlog.get_logger(__name__)


class ExtraFieldsModel(pydantic.BaseModel):
    """Base model that keeps unknown fields and logs them at debug level.

    PrusaLink firmware versions differ in which fields they report, so unknown fields are expected
    and never treated as an error.
    """

    model_config = pydantic.ConfigDict(extra="allow")

    def __init__(self, **data: typing.Any):
        """Initialize the model."""
        super().__init__(**data)
        if self.__pydantic_extra__:
            logger.debug(
                f"Model {self.__class__.__name__} received unknown fields: {list(self.__pydantic_extra__.keys())}"
            )
            logger.debug("Full JSON", json=json.dumps(data, default=str))


def truncate(value: typing.Any, max_length: int) -> typing.Any:
    """Cut a string down to `max_length` characters, leaving other values alone.

    Oversized names and states are shortened, never rejected.
    """
    if isinstance(value, str) and len(value) > max_length:
        logger.debug("Truncating oversized value", length=len(value), max_length=max_length)
        return value[:max_length]
    return value


def require_number(value: typing.Any, default: float = 0.0) -> float:
    """Coerce a JSON value to a float.

    A missing value (None) yields `default`. Booleans, non-numeric and non-finite values raise `ValueError`.
    """
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise ValueError(f"Expected a number, got {value!r}")
    try:
        number = float(value)
    except OverflowError as e:
        raise ValueError(f"Number out of range: {value!r}") from e
    if not math.isfinite(number):
        raise ValueError(f"Expected a finite number, got {value!r}")
    return number
