"""Exception types raised by tflow."""

from __future__ import annotations

__all__ = [
    "TflowError",
    "WorkflowError",
    "UnknownWorkflowError",
    "PipelineConfigError",
    "PipelineExecutionError",
]


class TflowError(Exception):
    """Root exception for tflow."""


class WorkflowError(TflowError):
    """Raised when running a workflow fails.

    Attributes:
        label: Display label of the workflow that failed.
        reason: Message of the underlying failure.
    """

    def __init__(self, label: str, reason: str) -> None:
        self.label = label
        self.reason = reason
        super().__init__(f"Problem running workflow: {label}\n{reason}")


class UnknownWorkflowError(TflowError, KeyError):
    """Raised when a label does not match any registered workflow."""

    def __init__(self, label: str, available: list[str] | None = None) -> None:
        self.label = label
        self.available = available or []
        super().__init__(label)

    def __str__(self) -> str:
        message = f"Unknown workflow: {self.label}"
        if self.available:
            message += f" (available: {', '.join(self.available)})"
        return message


class PipelineConfigError(TflowError, ValueError):
    """Raised when pipeline arguments or a workflow XML are malformed."""


class PipelineExecutionError(TflowError):
    """Raised when the pipeline executor reports a failure.

    Attributes:
        returncode: Exit status of the pipeline process, if any.
        stderr: Captured error output of the pipeline process.
    """

    def __init__(self, message: str, returncode: int | None = None, stderr: str = "") -> None:
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)
