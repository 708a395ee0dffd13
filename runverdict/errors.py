"""Exceptions raised by a verdict run. Every one of them is fatal for the invocation."""


class RunVerdictError(RuntimeError):
    """Base class for errors surfaced to the caller of a run."""


class ConfigurationError(RunVerdictError):
    """Required configuration is missing or invalid (e.g. no ntfy topic)."""


class UpstreamFetchError(RunVerdictError):
    """The weather or air-quality source failed or returned an unusable payload."""

    def __init__(self, source: str, detail: str, *, status_code: int | None = None) -> None:
        self.source = source
        self.status_code = status_code
        super().__init__(f"{source} fetch failed: {detail}")


class DeliveryError(RunVerdictError):
    """The notification endpoint did not acknowledge the push."""

    def __init__(self, detail: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(f"ntfy push failed: {detail}")
