"""Printer status models for the PrusaLink client."""

import typing
from enum import StrEnum

import pydantic

from prusa.link.client import consts

from .common import ExtraFieldsModel, require_number, truncate


class PrinterState(StrEnum):
    """Enum representing the states reported by `/api/v1/status`."""

    IDLE = "IDLE"
    READY = "READY"

    BUSY = "BUSY"
    PRINTING = "PRINTING"

    PAUSED = "PAUSED"
    FINISHED = "FINISHED"
    STOPPED = "STOPPED"

    ATTENTION = "ATTENTION"
    ERROR = "ERROR"

    # Fallback for unknown states
    UNKNOWN = "UNKNOWN"

    @classmethod
    def _missing_(cls, value: object) -> typing.Any:
        return cls.UNKNOWN


class PrinterStatus(ExtraFieldsModel):
    """Snapshot of the printer section of `/api/v1/status`.

    The raw `state` string is kept (truncated, never rejected) and the state flags are
    derived from it on demand, so they can never disagree with each other.
    """

    state: str = "UNKNOWN"
    temp_bed: float = 0.0
    target_bed: float = 0.0
    temp_nozzle: float = 0.0
    target_nozzle: float = 0.0

    axis_x: float | None = None
    axis_y: float | None = None
    axis_z: float | None = None
    flow: int | None = None
    speed: int | None = None
    fan_hotend: int | None = None
    fan_print: int | None = None

    @pydantic.field_validator("state", mode="before")
    @classmethod
    def truncate_state(cls, v: typing.Any) -> typing.Any:
        """Replace a null state and shorten oversized ones."""
        if v is None:
            return "UNKNOWN"
        return truncate(v, consts.MAX_STATE_LENGTH)

    @pydantic.field_validator("temp_bed", "target_bed", "temp_nozzle", "target_nozzle", mode="before")
    @classmethod
    def check_temperature(cls, v: typing.Any) -> float:
        """Temperatures default to 0.0 when absent but must be numeric when present."""
        return require_number(v)

    @property
    def printer_state(self) -> PrinterState:
        """The state as a `PrinterState` member (UNKNOWN for unrecognised strings)."""
        return PrinterState(self.state)

    @property
    def is_printing(self) -> bool:
        return self.printer_state is PrinterState.PRINTING

    @property
    def is_paused(self) -> bool:
        return self.printer_state is PrinterState.PAUSED

    @property
    def is_error(self) -> bool:
        return self.printer_state in (PrinterState.ERROR, PrinterState.ATTENTION)

    @property
    def is_ready(self) -> bool:
        return self.printer_state is PrinterState.IDLE

    @property
    def is_busy(self) -> bool:
        return self.printer_state is PrinterState.BUSY

    @property
    def is_finished(self) -> bool:
        return self.printer_state is PrinterState.FINISHED

    @classmethod
    def from_response(cls, data: typing.Any) -> "PrinterStatus":
        """Decode a `/api/v1/status` response body.

        Args:
            data: The decoded JSON document.

        Returns:
            A new `PrinterStatus`.

        Raises:
            ValueError: If the `printer` object is missing or a field has the wrong type.
            pydantic.ValidationError: If a field fails validation.
        """
        if not isinstance(data, dict):
            raise ValueError("Status response is not a JSON object")
        printer = data.get("printer")
        if not isinstance(printer, dict):
            raise ValueError("Status response has no 'printer' object")
        return cls.model_validate(printer)
