"""
Append-only backing stores for MMR node hashes.

A store holds one hash per node (leaves and parents) addressed by 1-based
position, plus optionally the original leaf payloads. Stores do no tree
math; callers use :mod:`mmrkit.navigation` to decide what to append.

Contract shared by every implementation:
    - append-only: entries are never mutated or removed
    - ``hash_at(pos)`` maps position ``pos`` to index ``pos - 1``
    - reads outside ``[1, size]`` raise :class:`MissingHashError`
    - single writer; concurrent readers of written positions are safe
"""

from __future__ import annotations

import json
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Generic, List, Optional, Sequence, TypeVar, Union

from .config import StoreConfig
from .errors import MissingHashError, StoreCorruptedError, StoreWriteError
from .observability import get_logger

T = TypeVar("T")


class Store(ABC, Generic[T]):
    """Capability interface for MMR backing storage."""

    @abstractmethod
    def append(self, elem: T, hashes: Sequence[bytes]) -> None:
        """
        Append a leaf payload and the hashes it produced.

        ``hashes`` is the leaf hash followed by every parent hash completed
        by this leaf, in position order.
        """

    @abstractmethod
    def hash_at(self, pos: int) -> bytes:
        """Return the hash of the node at ``pos``."""

    @abstractmethod
    def peak_hash_at(self, pos: int) -> bytes:
        """Return the hash of the peak at ``pos``."""

    @property
    @abstractmethod
    def size(self) -> int:
        """Number of node hashes stored (the MMR size)."""

    def __len__(self) -> int:
        return self.size


class MemoryStore(Store[T]):
    """
    List-backed store.

    Attributes:
        data: Leaf payloads in insertion order, ``None`` in hashes-only mode.
            Its length is the leaf count, not the node count.
        hashes: Hashes for every node, ``hashes[pos - 1]`` for position ``pos``.
    """

    def __init__(self, retain_payloads: bool = True) -> None:
        self.data: Optional[List[T]] = [] if retain_payloads else None
        self.hashes: List[bytes] = []

    @property
    def size(self) -> int:
        return len(self.hashes)

    def append(self, elem: T, hashes: Sequence[bytes]) -> None:
        if self.data is not None:
            self.data.append(elem)
        self.hashes.extend(hashes)

    def hash_at(self, pos: int) -> bytes:
        if not 1 <= pos <= len(self.hashes):
            raise MissingHashError(pos)
        return self.hashes[pos - 1]

    def peak_hash_at(self, pos: int) -> bytes:
        return self.hash_at(pos)

    def __repr__(self) -> str:
        mode = "payloads" if self.data is not None else "hashes-only"
        return f"MemoryStore(size={self.size}, mode={mode})"


class FileStore(Store[bytes]):
    """
    Append-only JSON-lines file store for ``bytes`` payloads.

    Each ``append`` call writes one line::

        {"hashes": ["<hex>", ...], "elem": "<hex>"}

    ``elem`` is omitted in hashes-only mode. The file is read once on open;
    reads are then served from memory.
    """

    def __init__(self, path: Union[str, Path], retain_payloads: bool = True) -> None:
        self._path = Path(path)
        self._log = get_logger("store", backend="file", path=str(self._path))
        self.data: Optional[List[bytes]] = [] if retain_payloads else None
        self.hashes: List[bytes] = []

        if self._path.exists():
            self._load()
        else:
            self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def path(self) -> Path:
        return self._path

    @property
    def size(self) -> int:
        return len(self.hashes)

    def _load(self) -> None:
        with open(self._path, "rb") as f:
            for lineno, raw in enumerate(f, start=1):
                if not raw.strip():
                    continue
                try:
                    record = json.loads(raw.decode("utf-8"))
                    hashes = [bytes.fromhex(h) for h in record["hashes"]]
                    elem = record.get("elem")
                    if self.data is not None:
                        if elem is None:
                            raise ValueError("record has no payload")
                        self.data.append(bytes.fromhex(elem))
                except (ValueError, KeyError, TypeError) as e:
                    # UnicodeDecodeError is a ValueError
                    raise StoreCorruptedError(
                        f"{self._path}:{lineno}: invalid record: {e}"
                    ) from e
                self.hashes.extend(hashes)

        self._log.debug("Loaded store", extra={"context": {"size": self.size}})

    def append(self, elem: bytes, hashes: Sequence[bytes]) -> None:
        if not isinstance(elem, (bytes, bytearray)):
            raise TypeError(f"FileStore payloads must be bytes, got {type(elem).__name__}")

        for h in hashes:
            if not isinstance(h, (bytes, bytearray)):
                raise TypeError(f"FileStore hashes must be bytes, got {type(h).__name__}")

        record = {"hashes": [bytes(h).hex() for h in hashes]}
        if self.data is not None:
            record["elem"] = bytes(elem).hex()

        try:
            with open(self._path, "a", encoding="utf-8") as f:
                f.write(json.dumps(record, separators=(",", ":")) + "\n")
                f.flush()
        except OSError as e:
            raise StoreWriteError(f"Failed to append to {self._path}: {e}") from e

        # memory only advances once the record is on disk
        if self.data is not None:
            self.data.append(bytes(elem))
        self.hashes.extend(hashes)

    def hash_at(self, pos: int) -> bytes:
        if not 1 <= pos <= len(self.hashes):
            raise MissingHashError(pos)
        return self.hashes[pos - 1]

    def peak_hash_at(self, pos: int) -> bytes:
        return self.hash_at(pos)

    def __repr__(self) -> str:
        return f"FileStore(path={str(self._path)!r}, size={self.size})"


def open_store(config: Optional[StoreConfig] = None) -> Store:
    """Create the store described by ``config`` (defaults to in-memory)."""
    config = config or StoreConfig()

    if config.backend == "file":
        store: Store = FileStore(config.path, retain_payloads=config.retain_payloads)
    else:
        store = MemoryStore(retain_payloads=config.retain_payloads)

    log = get_logger("store", backend=config.backend, retain_payloads=config.retain_payloads)
    log.info("Opened store", extra={"context": {"size": store.size}})
    return store
