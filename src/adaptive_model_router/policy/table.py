# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""Priority-ordered, read-only table of model policies."""

import json
import logging
from collections.abc import Iterable, Iterator, Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ..exceptions import ConfigurationError
from .models import ModelPolicy

logger = logging.getLogger(__name__)


class PolicyTable:
    """
    Immutable collection of ModelPolicy entries.

    Iteration yields policies in ascending ``(priority, model_id)`` order,
    independent of declaration order, so the router's first-match evaluation
    is a deterministic total order.
    """

    def __init__(self, policies: Iterable[ModelPolicy] = ()):
        by_id: dict[str, ModelPolicy] = {}
        for policy in policies:
            if policy.model_id in by_id:
                logger.warning(
                    f"Duplicate policy for model {policy.model_id}; keeping the first"
                )
                continue
            by_id[policy.model_id] = policy
        self._policies: tuple[ModelPolicy, ...] = tuple(
            sorted(by_id.values(), key=lambda p: (p.priority, p.model_id))
        )
        self._by_id = by_id

    @classmethod
    def from_mapping(cls, data: Mapping[str, Mapping[str, Any]]) -> "PolicyTable":
        """
        Build a table from ``{model_id: policy_fields}``.

        Entries that fail validation are skipped with a warning; the rest of
        the table is still loaded.
        """
        policies = []
        for model_id, fields in data.items():
            try:
                if not isinstance(fields, Mapping):
                    raise TypeError("policy entry must be an object")
                policies.append(ModelPolicy.model_validate({**fields, "model_id": model_id}))
            except (ValidationError, TypeError) as e:
                logger.warning(f"Skipping malformed policy for model {model_id}: {e}")
        return cls(policies)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "PolicyTable":
        """
        Load a table from a JSON file holding ``{model_id: policy_fields}``.

        Raises:
            ConfigurationError: If the file cannot be read or is not a JSON object
        """
        try:
            data = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, ValueError) as e:
            raise ConfigurationError(f"Cannot load policy table {path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError(f"Policy table {path} must be a JSON object")
        return cls.from_mapping(data)

    def __iter__(self) -> Iterator[ModelPolicy]:
        return iter(self._policies)

    def __len__(self) -> int:
        return len(self._policies)

    def __contains__(self, model_id: object) -> bool:
        return model_id in self._by_id

    def get(self, model_id: str) -> ModelPolicy | None:
        return self._by_id.get(model_id)

    @property
    def model_ids(self) -> tuple[str, ...]:
        """Model ids in priority order."""
        return tuple(p.model_id for p in self._policies)


__all__ = ["PolicyTable"]
