from typing import Optional


class BlueGreenDeploymentError(Exception):
    def __init__(self, message: str, stage: str = ""):
        super().__init__(message)
        self.message = message
        self.stage = stage

    def __str__(self):
        context = f" [Stage: {self.stage}]" if self.stage else ""
        return f"{self.message}{context}"


class NotResolvableError(BlueGreenDeploymentError):
    """A version qualifier could not be computed from the available revisions."""
    def __init__(self, qualifier: str, reason: str = ""):
        message = f"Version qualifier '{qualifier}' is not resolvable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, stage="RESOLVING")
        self.qualifier = qualifier


class InvocationSubmitError(BlueGreenDeploymentError):
    def __init__(self, message: str):
        super().__init__(message, stage="INVOKING")


class TaskTimeoutError(BlueGreenDeploymentError):
    def __init__(self, message: str = "Lambda Invocation did not finish on time", attempts: int = 0):
        super().__init__(message, stage="POLLING")
        self.attempts = attempts


class PollCancelledError(BlueGreenDeploymentError):
    def __init__(self, message: str = "Lambda Invocation verification was cancelled", attempts: int = 0):
        super().__init__(message, stage="POLLING")
        self.attempts = attempts


class RemoteTaskFailedError(BlueGreenDeploymentError):
    def __init__(self, message: str = "Lambda Invocation returned failure", remote_message: Optional[str] = None):
        super().__init__(message, stage="POLLING")
        self.remote_message = remote_message


class ComparisonMismatchError(BlueGreenDeploymentError):
    def __init__(self, expected: str, actual: str):
        super().__init__(
            f"BlueGreenDeployment failed: Comparison failed. expected : [{expected}], actual : [{actual}]",
            stage="COMPARING",
        )
        self.expected = expected
        self.actual = actual


class RetriesExhaustedError(BlueGreenDeploymentError):
    def __init__(self, attempts: int, last_error: Optional[BaseException]):
        super().__init__(f"Gave up after {attempts} attempt(s): {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class PromotionFailedError(BlueGreenDeploymentError):
    def __init__(self, message: str):
        super().__init__(message, stage="PROMOTING")


# --- Transient failures, raised by collaborators ---

class TransientStatusError(Exception):
    """Task status could not be read this time. The poller keeps going."""


class ArtifactFetchError(IOError):
    """Artifact store was unreachable or returned an unusable response. Retryable."""
