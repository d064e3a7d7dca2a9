# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Model selection."""

from .selector import (
    REASON_DEGRADED,
    REASON_ERROR,
    REASON_FAST_QUOTA,
    REASON_NO_MATCH,
    REASON_NOT_PRIVILEGED,
    DecisionListener,
    ModelRouter,
)

__all__ = [
    "REASON_DEGRADED",
    "REASON_ERROR",
    "REASON_FAST_QUOTA",
    "REASON_NOT_PRIVILEGED",
    "REASON_NO_MATCH",
    "DecisionListener",
    "ModelRouter",
]
