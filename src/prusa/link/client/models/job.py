"""Job models for the PrusaLink client."""

import typing

import pydantic

from prusa.link.client import consts

from .common import ExtraFieldsModel, require_number, truncate


class JobInfo(ExtraFieldsModel):
    """Snapshot of the active job reported by `/api/v1/job`."""

    file_name: str = "No file"
    completion: float = 0.0  # fraction, 0..1
    print_time: int = 0
    print_time_left: int = 0
    job_id: int | None = None
    state: str | None = None

    @pydantic.field_validator("file_name", mode="before")
    @classmethod
    def truncate_file_name(cls, v: typing.Any) -> typing.Any:
        """Replace a null name and shorten oversized ones."""
        if v is None:
            return "No file"
        return truncate(v, consts.MAX_FILE_NAME_LENGTH)

    @property
    def progress_percent(self) -> float:
        """Completion as a percentage in the range 0..100."""
        return self.completion * 100.0

    @classmethod
    def from_response(cls, data: typing.Any) -> "JobInfo":
        """Decode a `/api/v1/job` response body.

        Two layouts are understood:

        - `progress` is an object with `completion`, `print_time` and `print_time_left`;
        - `progress` is a percentage (0..100) and the times are top-level `time_printing` / `time_remaining`.

        `completion` is stored as a fraction (0..1) in both cases.

        Args:
            data: The decoded JSON document.

        Returns:
            A new `JobInfo`.

        Raises:
            ValueError: If there is no `progress` field (no active job) or a field has the wrong type.
            pydantic.ValidationError: If a field fails validation.
        """
        if not isinstance(data, dict):
            raise ValueError("Job response is not a JSON object")
        if "progress" not in data:
            raise ValueError("Job response has no 'progress' field")

        progress = data["progress"]
        if isinstance(progress, dict):
            completion = require_number(progress.get("completion"))
            print_time = require_number(progress.get("print_time"))
            print_time_left = require_number(progress.get("print_time_left"))
        else:
            completion = require_number(progress) / 100.0
            print_time = require_number(data.get("time_printing"))
            print_time_left = require_number(data.get("time_remaining"))

        file_info = data.get("file")
        file_name = None
        if isinstance(file_info, dict):
            file_name = file_info.get("display_name") or file_info.get("name")

        return cls.model_validate(
            {
                "file_name": file_name,
                "completion": completion,
                "print_time": int(print_time),
                "print_time_left": int(print_time_left),
                "job_id": data.get("id"),
                "state": data.get("state"),
            }
        )
