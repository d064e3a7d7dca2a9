"""Tests for UserState."""

import pytest

from adaptive_model_router.types.user_state import UserState

PRIVILEGED = ("pro", "business")


class TestUserState:
    def test_fail_open_is_unprivileged_without_quota(self):
        state = UserState.fail_open()
        assert state.is_privileged is False
        assert state.fast_quota_remaining == 0
        assert state.accessible_models == frozenset()
        assert state.tier == "free"

    def test_negative_quota_rejected(self):
        with pytest.raises(ValueError):
            UserState(fast_quota_remaining=-1)

    def test_from_responses(self):
        state = UserState.from_responses(
            {"tier": "Pro", "accessibleModels": ["gemini-2.5-pro", "claude-3.7-sonnet"]},
            {"fastRequests": {"remaining": 12}, "totalRequests": 340},
            PRIVILEGED,
        )
        assert state.is_privileged is True
        assert state.tier == "pro"
        assert state.fast_quota_remaining == 12
        assert state.total_requests == 340
        assert state.accessible_models == frozenset({"gemini-2.5-pro", "claude-3.7-sonnet"})

    def test_from_responses_free_tier(self):
        state = UserState.from_responses({"tier": "free"}, {}, PRIVILEGED)
        assert state.is_privileged is False
        assert state.fast_quota_remaining == 0

    def test_negative_remaining_clamped(self):
        state = UserState.from_responses(
            {"tier": "pro"}, {"fastRequests": {"remaining": -3}}, PRIVILEGED
        )
        assert state.fast_quota_remaining == 0

    def test_malformed_models_rejected(self):
        with pytest.raises(TypeError):
            UserState.from_responses({"tier": "pro", "accessibleModels": "all"}, {}, PRIVILEGED)

    def test_malformed_quota_rejected(self):
        with pytest.raises(ValueError):
            UserState.from_responses(
                {"tier": "pro"}, {"fastRequests": {"remaining": "lots"}}, PRIVILEGED
            )
