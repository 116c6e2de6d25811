"""Error kinds raised by the workbench core and its data sources."""


class WorkbenchError(Exception):
    """Base class for all workbench errors."""


class SourceUnavailable(WorkbenchError):
    """Catalog or evaluation source is unreachable or malformed."""

    def __init__(self, source: str, reason: str = ""):
        self.source = source
        self.reason = reason
        message = f"Data source unavailable: {source}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)


class NotFound(WorkbenchError):
    """A referenced id does not exist."""

    def __init__(self, kind: str, item_id: str):
        self.kind = kind
        self.item_id = item_id
        super().__init__(f"{kind} not found: {item_id}")


class ArtifactUnavailable(WorkbenchError):
    """Transport failure while fetching results, logs or judge scores.

    Legitimate absence of data is never reported with this error.
    """

    def __init__(self, eval_id: str, operation: str, reason: str = ""):
        self.eval_id = eval_id
        self.operation = operation
        self.reason = reason
        message = f"Could not fetch {operation} for evaluation {eval_id}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class InvalidInput(WorkbenchError):
    """A required text field is missing or blank."""

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"{field} must not be empty")


class InvalidSelection(WorkbenchError):
    """Wrong number of models selected for a comparison."""

    def __init__(self, count: int, minimum: int, maximum: int):
        self.count = count
        self.minimum = minimum
        self.maximum = maximum
        if count < minimum:
            message = f"Select at least {minimum} models to compare (got {count})"
        else:
            message = f"Select no more than {maximum} models (got {count})"
        super().__init__(message)


class AlreadyRunning(WorkbenchError):
    """A run for the same evaluation is already in flight."""

    def __init__(self, eval_id: str):
        self.eval_id = eval_id
        super().__init__(f"Evaluation {eval_id} is already running")


class RunFailed(WorkbenchError):
    """A run or one model of a comparison failed to execute."""

    def __init__(
        self,
        reason: str,
        eval_id: str | None = None,
        model_id: str | None = None,
    ):
        self.reason = reason
        self.eval_id = eval_id
        self.model_id = model_id
        if model_id:
            target = f"model {model_id}"
        elif eval_id:
            target = f"evaluation {eval_id}"
        else:
            target = "run"
        super().__init__(f"Run failed for {target}: {reason}")


class DatasetImportFailed(WorkbenchError):
    """Dataset API rejected an import or delete request."""

    def __init__(self, operation: str, status_code: int | None = None, reason: str = ""):
        self.operation = operation
        self.status_code = status_code
        self.reason = reason
        message = f"Dataset {operation} failed"
        if status_code is not None:
            message = f"{message} (HTTP {status_code})"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
