"""Unit tests for the exceptions module.

Tests all exception classes defined in adaptive_model_router.exceptions.
"""

import pytest

from adaptive_model_router.exceptions import (
    ConfigurationError,
    CredentialInvalidError,
    ModelRouterError,
    QuotaExceededError,
    UpstreamUnavailableError,
)


class TestModelRouterError:
    """Tests for the base ModelRouterError exception."""

    def test_can_be_caught_as_exception(self):
        """ModelRouterError can be caught as a standard Exception."""
        with pytest.raises(Exception):  # noqa: B017
            raise ModelRouterError("test error")

    def test_message_preserved(self):
        error = ModelRouterError("test message")
        assert str(error) == "test message"

    @pytest.mark.parametrize(
        "error",
        [
            UpstreamUnavailableError("down"),
            CredentialInvalidError("rejected"),
            QuotaExceededError("slow down"),
            ConfigurationError("bad file"),
        ],
    )
    def test_subclasses_caught_by_base(self, error):
        """Every library error is caught by one except ModelRouterError clause."""
        with pytest.raises(ModelRouterError):
            raise error


class TestUpstreamUnavailableError:
    def test_status_code_defaults_to_none(self):
        assert UpstreamUnavailableError("timeout").status_code is None

    def test_status_code_preserved(self):
        error = UpstreamUnavailableError("server error", status_code=503)
        assert error.status_code == 503
        assert str(error) == "server error"


class TestCredentialInvalidError:
    def test_status_code_preserved(self):
        assert CredentialInvalidError("rejected", status_code=401).status_code == 401


class TestQuotaExceededError:
    def test_retry_after_defaults_to_none(self):
        assert QuotaExceededError("rate limited").retry_after is None

    def test_retry_after_preserved(self):
        assert QuotaExceededError("rate limited", retry_after=12.5).retry_after == 12.5
