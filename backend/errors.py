"""
Error taxonomy.

Registry-layer failures all derive from RegistryError so the analysis service
can wrap them in one place. ValidationError is the only user-correctable one.
"""


class ValidationError(ValueError):
    """Bad search input (empty name, non-positive page)."""


class RegistryError(Exception):
    """Base class for failures talking to the trademark registry."""


class SessionError(RegistryError):
    """No session cookie could be obtained from the registry."""


class CaptchaError(RegistryError):
    def __init__(self, attempts: int):
        super().__init__(f"CAPTCHA challenge still present after {attempts} attempts")
        self.attempts = attempts


class RegistryTimeoutError(RegistryError, TimeoutError):
    """A registry request exceeded its time budget."""


class UpstreamError(RegistryError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ParseError(RegistryError):
    """The registry answered with something that is not a results page."""


class AnalysisError(Exception):
    """Raised by the analysis service; the registry failure is chained as __cause__."""
