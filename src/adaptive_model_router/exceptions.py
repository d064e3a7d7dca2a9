# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Exception classes for the adaptive model router library.

This module defines the exception hierarchy used throughout the library.
All exceptions inherit from ModelRouterError, making it easy to catch
all router-related exceptions with a single except clause.

None of these errors escape ``ModelRouter.route``: the router converts every
failure into a pass-through to the originally requested model.
"""


class ModelRouterError(Exception):
    """Base exception for all model router errors.

    Example:
        try:
            status = await account_client.get_status()
        except ModelRouterError as e:
            logger.warning(f"Account service call failed: {e}")
    """

    pass


class UpstreamUnavailableError(ModelRouterError):
    """Raised when the account service cannot be reached or answers badly.

    Covers transport errors, timeouts, 5xx responses and unparseable bodies.
    Callers fail open: the user state falls back to safe defaults.

    Attributes:
        status_code: HTTP status code when a response was received, else None.
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class CredentialInvalidError(ModelRouterError):
    """Raised when the account service rejects the credential (401/403).

    This is a signal, not a hard failure: it triggers credential rotation.

    Attributes:
        status_code: The rejecting HTTP status code (401 or 403).
    """

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class QuotaExceededError(ModelRouterError):
    """Raised when the account service answers 429.

    Transient: callers back off and must not rotate credentials.

    Attributes:
        retry_after: Suggested wait in seconds, if the service sent one.

    Example:
        try:
            usage = await account_client.get_usage()
        except QuotaExceededError as e:
            backoff = e.retry_after or 30.0
    """

    def __init__(self, message: str, retry_after: float | None = None):
        super().__init__(message)
        self.retry_after = retry_after


class ConfigurationError(ModelRouterError):
    """Raised when a configuration source is unusable as a whole.

    Individual malformed entries (one model policy, one credential file) are
    skipped with a warning instead of raising.
    """

    pass


__all__ = [
    "ConfigurationError",
    "CredentialInvalidError",
    "ModelRouterError",
    "QuotaExceededError",
    "UpstreamUnavailableError",
]
