"""
errors.py
---------
Exceptions raised by wifispeed.

Provider failures (ScanFailed and subclasses) only move the scan on to the
next provider. AllSourcesExhausted is raised once every provider has failed.

Author: wifispeed contributors
18 October 2026
"""


class WiFiSpeedError(Exception):
    """Base class for all wifispeed errors."""


class PermissionDenied(WiFiSpeedError):
    """The command needs root privileges."""


class ScanFailed(WiFiSpeedError):
    """A scan provider could not produce a network list."""

    def __init__(self, message, provider=None, output=None):
        super().__init__(message)
        self.provider = provider
        self.output = output


class ToolUnavailable(ScanFailed):
    """The scanning command or wireless interface is missing."""


class ToolExecutionFailed(ScanFailed):
    """The scanning command or library ran but failed or returned nothing usable."""


class AllSourcesExhausted(WiFiSpeedError):
    """Every scan provider failed."""

    def __init__(self, failures):
        self.failures = list(failures)
        names = ", ".join(name for name, _ in self.failures) or "none"
        super().__init__(f"all scanning methods failed ({names})")


class UpstreamServiceError(WiFiSpeedError):
    """A speed test step failed."""

    def __init__(self, step, cause):
        super().__init__(f"Error {step}: {cause}")
        self.step = step
        self.cause = cause
