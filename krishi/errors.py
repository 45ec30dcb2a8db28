class KrishiError(Exception):
    """Base class for errors raised by the krishi package."""


class BackendError(KrishiError):
    """The data backend failed for a reason other than a missing record."""

    def __init__(self, message: str, code: str = "") -> None:
        super().__init__(message)
        self.code = code


class AnalysisError(KrishiError):
    """An analysis request was rejected before it started (bad or missing input)."""

    def __init__(self, message: str, status_code: int = 400) -> None:
        super().__init__(message)
        self.status_code = status_code
