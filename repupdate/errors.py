"""
Errors — Exception types and process exit codes.

Only two conditions abort a run: a backup host that cannot be listed
(FatalDiscoveryError) and a failed backup pass before scrub. Everything
else is recovered per repository and folded into the exit code.
"""

from __future__ import annotations

# Process exit codes
EXIT_OK = 0
EXIT_PARTIAL_FAILURE = 1  # some create/update/push failed
EXIT_FATAL = 2  # backup host could not be listed, bad config
EXIT_SCRUB_FAILURE = 2  # some delete failed


class RepupdateError(Exception):
    """Base exception for all repupdate errors."""

    pass


class ConfigError(RepupdateError):
    """Invalid or missing host configuration."""

    pass


class HostError(RepupdateError):
    """A hosting provider API call failed."""

    def __init__(self, host: str, message: str) -> None:
        super().__init__(f"{host}: {message}")
        self.host = host
        self.message = message


class FatalDiscoveryError(RepupdateError):
    """A backup host could not be listed; the inventory is untrustworthy."""

    def __init__(self, host: str, cause: Exception) -> None:
        super().__init__(f"Failed to fetch backup host repositories from {host}: {cause}")
        self.host = host
        self.cause = cause


class GitCommandError(RepupdateError):
    """A git invocation failed or timed out."""

    def __init__(self, command: str, message: str) -> None:
        super().__init__(f"git {command}: {message}")
        self.command = command
        self.message = message
