"""Commitment registries mapping an identity to its stored commitment."""

from __future__ import annotations

import json
import logging
import os
import tempfile
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional

from .params import GlobalParameters

logger = logging.getLogger(__name__)


@dataclass
class CommitmentRecord:
    """Stored commitment for a single identity."""

    identity: str
    commitment: int

    def to_dict(self) -> Dict[str, str]:
        return {
            "identity": self.identity,
            "commitment": hex(self.commitment),
        }

    @staticmethod
    def from_dict(data: Dict[str, str]) -> "CommitmentRecord":
        return CommitmentRecord(
            identity=str(data["identity"]),
            commitment=int(data["commitment"], 16),
        )


class CommitmentRegistry(ABC):
    """Atomic upsert and lookup by opaque identity.

    Commitments are stored as given: no range check, no zero check. Absence
    is reported as ``None`` so a stored ``0`` stays distinguishable.
    """

    @abstractmethod
    def register(self, identity: str, commitment: int) -> None:
        """Store ``commitment`` for ``identity``, replacing any prior value."""

    @abstractmethod
    def lookup(self, identity: str) -> Optional[int]:
        """Return the stored commitment or ``None`` if never registered."""

    @abstractmethod
    def identities(self) -> List[str]:
        """Sorted identities with a stored commitment."""

    def __contains__(self, identity: object) -> bool:
        return isinstance(identity, str) and self.lookup(identity) is not None


class MemoryRegistry(CommitmentRegistry):
    """In-process registry guarded by a single lock."""

    def __init__(self) -> None:
        self._records: Dict[str, int] = {}
        self._lock = threading.Lock()

    def register(self, identity: str, commitment: int) -> None:
        with self._lock:
            replaced = identity in self._records
            self._records[identity] = commitment
        logger.info("Registered commitment for %s (replaced=%s)", identity, replaced)

    def lookup(self, identity: str) -> Optional[int]:
        with self._lock:
            return self._records.get(identity)

    def identities(self) -> List[str]:
        with self._lock:
            return sorted(self._records)


class JsonRegistry(CommitmentRegistry):
    """JSON-file backed registry.

    Writes go to a temporary file in the same directory and are moved into
    place with :func:`os.replace`, so readers only ever see a complete file.
    The optional ``parameters`` entry lets command line sessions share the
    global parameters a store was initialised with.
    """

    def __init__(self, path: str) -> None:
        self.path = path
        self._lock = threading.Lock()
        self._ensure_file()

    def _ensure_file(self) -> None:
        with self._lock:
            if not os.path.exists(self.path):
                self._save({"devices": []})

    def _load(self) -> Dict[str, object]:
        with open(self.path, "r", encoding="utf-8") as handle:
            return json.load(handle)

    def _save(self, payload: Dict[str, object]) -> None:
        directory = os.path.dirname(os.path.abspath(self.path))
        fd, tmp_path = tempfile.mkstemp(prefix=".registry-", suffix=".json", dir=directory)
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(payload, handle, indent=2)
            os.replace(tmp_path, self.path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def _records(self, payload: Dict[str, object]) -> List[Dict[str, str]]:
        return payload.setdefault("devices", [])  # type: ignore[return-value]

    def register(self, identity: str, commitment: int) -> None:
        record = CommitmentRecord(identity=identity, commitment=commitment)
        with self._lock:
            payload = self._load()
            devices = self._records(payload)
            for index, raw in enumerate(devices):
                if raw.get("identity") == identity:
                    devices[index] = record.to_dict()
                    replaced = True
                    break
            else:
                devices.append(record.to_dict())
                replaced = False
            self._save(payload)
        logger.info("Registered commitment for %s (replaced=%s)", identity, replaced)

    def lookup(self, identity: str) -> Optional[int]:
        with self._lock:
            payload = self._load()
        for raw in self._records(payload):
            if raw.get("identity") == identity:
                return CommitmentRecord.from_dict(raw).commitment
        return None

    def identities(self) -> List[str]:
        with self._lock:
            payload = self._load()
        return sorted(str(raw["identity"]) for raw in self._records(payload))

    def read_parameters(self) -> Optional[GlobalParameters]:
        with self._lock:
            payload = self._load()
        raw = payload.get("parameters")
        if raw is None:
            return None
        return GlobalParameters.from_dict(raw)  # type: ignore[arg-type]

    def write_parameters(self, params: GlobalParameters) -> None:
        with self._lock:
            payload = self._load()
            payload["parameters"] = params.to_dict()
            self._save(payload)


__all__ = ["CommitmentRecord", "CommitmentRegistry", "JsonRegistry", "MemoryRegistry"]
