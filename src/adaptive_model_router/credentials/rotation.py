# Copyright 2026 Seth Bang
# SPDX-License-Identifier: Apache-2.0
"""
Bounded rotation file of recently valid credentials.

The file is a JSON list, newest first, holding at most ``capacity`` entries.
Writes go to a temporary file in the same directory which is then renamed
over the original, so a crash mid-write never leaves a truncated list.
"""

import contextlib
import json
import logging
import os
import tempfile
from pathlib import Path

from ..types.credential import Credential

logger = logging.getLogger(__name__)

DEFAULT_ROTATION_SIZE = 3


class RotationFile:
    """
    Newest-first credential list persisted as JSON.

    Methods are blocking; async callers run them in a worker thread.
    """

    def __init__(self, path: str | Path, capacity: int = DEFAULT_ROTATION_SIZE):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self.path = Path(path)
        self.capacity = capacity

    def load(self) -> list[Credential]:
        """
        Read the list. Missing or unreadable files yield an empty list;
        malformed entries are skipped.
        """
        try:
            raw = self.path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return []
        except OSError as e:
            logger.warning(f"Cannot read rotation file {self.path}: {e}")
            return []
        except UnicodeDecodeError as e:
            logger.warning(f"Rotation file {self.path} is not valid UTF-8, ignoring it: {e}")
            return []

        try:
            data = json.loads(raw)
        except ValueError as e:
            logger.warning(f"Rotation file {self.path} is not valid JSON, ignoring it: {e}")
            return []
        if not isinstance(data, list):
            logger.warning(f"Rotation file {self.path} does not hold a list, ignoring it")
            return []

        credentials = []
        for item in data:
            try:
                credentials.append(Credential.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed rotation entry: {e}")
        return credentials[: self.capacity]

    def save(self, credentials: list[Credential]) -> None:
        """
        Atomically replace the file with the first ``capacity`` credentials.

        Raises:
            OSError: If the directory or file cannot be written
        """
        entries = [c.to_dict() for c in credentials[: self.capacity]]
        self.path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(entries, handle, indent=2)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_name, 0o600)
            os.replace(tmp_name, self.path)
        except BaseException:
            with contextlib.suppress(OSError):
                os.unlink(tmp_name)
            raise

    def push(self, credential: Credential) -> list[Credential]:
        """
        Prepend a credential, dropping older copies of the same secret and
        anything beyond capacity. Returns the list as written.
        """
        existing = [c for c in self.load() if c.secret != credential.secret]
        updated = [credential, *existing][: self.capacity]
        self.save(updated)
        return updated


__all__ = ["DEFAULT_ROTATION_SIZE", "RotationFile"]
