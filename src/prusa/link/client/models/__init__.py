"""Models for the PrusaLink client."""

from .common import ExtraFieldsModel
from .job import JobInfo
from .printer import PrinterState, PrinterStatus
from .target import EndpointTarget

__all__ = [
    "EndpointTarget",
    "ExtraFieldsModel",
    "JobInfo",
    "PrinterState",
    "PrinterStatus",
]
