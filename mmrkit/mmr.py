"""
Merkle Mountain Range driver built on the position navigator and a store.

This is the caller side of the core: it owns the hash function, walks
:mod:`mmrkit.navigation` to find which parents a new leaf completes, and
hands all resulting hashes to a :class:`~mmrkit.store.Store` in one append.

Hashing:
- LeafHash(data) = SHA256(0x00 || data)
- NodeHash(left, right) = SHA256(0x01 || left || right)
- Root = peaks bagged right-to-left with NodeHash

Complexity:
- Append: O(log N) hash operations, one store append
- Root: O(log N) store reads
- Proof: O(log N) store reads
"""

from __future__ import annotations

import hashlib
from dataclasses import dataclass, field
from typing import Callable, Generic, List, Optional, Tuple, TypeVar

from . import navigation
from .observability import get_logger
from .store import MemoryStore, Store

logger = get_logger("mmr")

T = TypeVar("T")

HASH_SIZE = 32

LEAF_PREFIX = b"\x00"
INTERNAL_PREFIX = b"\x01"
EMPTY_PREFIX = b"\x02"

# Root of the empty MMR (domain-separated, never a valid node hash)
EMPTY_HASH = hashlib.sha256(EMPTY_PREFIX).digest()


def hash_leaf(data: bytes) -> bytes:
    """Hash leaf data, prefixed with 0x00 to separate it from internal nodes."""
    return hashlib.sha256(LEAF_PREFIX + data).digest()


def hash_internal(left: bytes, right: bytes) -> bytes:
    """Hash two child hashes into their parent, prefixed with 0x01."""
    if len(left) != HASH_SIZE or len(right) != HASH_SIZE:
        raise ValueError(f"Child hashes must be {HASH_SIZE} bytes")
    return hashlib.sha256(INTERNAL_PREFIX + left + right).digest()


@dataclass
class MembershipProof:
    """
    Inclusion data for the node at ``pos`` in a MMR of ``mmr_size`` nodes.

    ``path`` holds ``(parent, sibling)`` positions from the node to its peak
    and ``siblings`` the matching sibling hashes. A sibling at
    ``parent - 1`` is a right child, otherwise it is a left child.
    ``peaks`` lists every peak hash of ``mmr_size`` left to right; the one
    at ``peak_pos`` is what the path rebuilds.
    """
    pos: int
    mmr_size: int
    node_hash: bytes
    path: List[Tuple[int, int]] = field(default_factory=list)
    siblings: List[bytes] = field(default_factory=list)
    peak_pos: int = 0
    peaks: List[bytes] = field(default_factory=list)

    @property
    def peak_index(self) -> int:
        """Index of the proved peak within ``peaks``."""
        return navigation.peaks(self.mmr_size).index(self.peak_pos)


class MerkleMountainRange(Generic[T]):
    """
    Merkle Mountain Range over an append-only store.

    Appending a fourth leaf (node positions)::

            3
           / \\
          1   2   4   5       <- the leaf at 5 completes 6 and 7

    Invariants:
    - ``store.size`` is always a stable size between appends
    - every append writes the leaf hash plus all parents it completes
    - history is never rewritten, so past roots stay computable
    """

    def __init__(
        self,
        store: Optional[Store[T]] = None,
        leaf_hasher: Callable[[bytes], bytes] = hash_leaf,
        node_hasher: Callable[[bytes, bytes], bytes] = hash_internal,
    ) -> None:
        self._store: Store[T] = store if store is not None else MemoryStore()
        self._hash_leaf = leaf_hasher
        self._hash_internal = node_hasher

        if not navigation.is_stable(self._store.size):
            raise ValueError(f"Store size {self._store.size} is not a stable MMR size")

    @property
    def store(self) -> Store[T]:
        return self._store

    @property
    def size(self) -> int:
        """Total number of nodes (leaves + internal)."""
        return self._store.size

    @property
    def leaf_count(self) -> int:
        """Number of leaves appended."""
        return navigation.leaf_count(self.size)

    def append(self, payload: bytes) -> int:
        """
        Hash ``payload`` as a leaf and append it.

        Returns:
            Position of the new leaf
        """
        return self.append_hash(self._hash_leaf(payload), payload)

    def append_hash(self, leaf_hash: bytes, payload: Optional[T] = None) -> int:
        """
        Append a pre-hashed leaf, completing every parent it closes.

        Returns:
            Position of the new leaf
        """
        leaf_pos = self.size + 1
        pos = leaf_pos
        current = leaf_hash
        hashes = [leaf_hash]

        # a right child closes its parent at pos + 1; keep climbing
        while not navigation.is_left(pos):
            parent, sibling = navigation.family(pos)
            current = self._hash_internal(self._store.hash_at(sibling), current)
            hashes.append(current)
            pos = parent

        self._store.append(payload, hashes)

        logger.debug(
            "Appended leaf",
            extra={"context": {"pos": leaf_pos, "parents": len(hashes) - 1, "size": self.size}},
        )
        return leaf_pos

    def _check_size(self, size: Optional[int]) -> int:
        if size is None:
            return self.size
        if size < 0 or size > self.size:
            raise ValueError(f"Size {size} out of range [0, {self.size}]")
        if not navigation.is_stable(size):
            raise ValueError(f"Size {size} is not a stable MMR size")
        return size

    def peaks(self, size: Optional[int] = None) -> List[int]:
        """Peak positions, left to right, for ``size`` (default: current)."""
        return navigation.peaks(self._check_size(size))

    def peak_hashes(self, size: Optional[int] = None) -> List[bytes]:
        """Peak hashes, left to right, for ``size`` (default: current)."""
        return [self._store.peak_hash_at(p) for p in self.peaks(size)]

    def root(self, size: Optional[int] = None) -> bytes:
        """
        Bag the peaks of ``size`` (default: current) into a single root.

        Passing an older stable size returns the root the MMR had then.
        """
        peak_hashes = self.peak_hashes(size)

        if not peak_hashes:
            return EMPTY_HASH

        result = peak_hashes[-1]
        for peak in reversed(peak_hashes[:-1]):
            result = self._hash_internal(peak, result)
        return result

    def prove(self, pos: int, size: Optional[int] = None) -> MembershipProof:
        """
        Collect inclusion data for the node at ``pos`` within ``size`` nodes.

        Raises:
            IndexError: If ``pos`` is not a node of the MMR at ``size``
            ValueError: If ``size`` is unstable or beyond the current size
        """
        size = self._check_size(size)
        if not 1 <= pos <= size:
            raise IndexError(f"Position {pos} out of bounds [1, {size}]")

        path = navigation.family_path(pos, size)
        siblings = [self._store.hash_at(sibling) for _, sibling in path]
        peak_pos = path[-1][0] if path else pos

        return MembershipProof(
            pos=pos,
            mmr_size=size,
            node_hash=self._store.hash_at(pos),
            path=path,
            siblings=siblings,
            peak_pos=peak_pos,
            peaks=self.peak_hashes(size),
        )

    def __len__(self) -> int:
        return self.leaf_count

    def __repr__(self) -> str:
        return f"MerkleMountainRange(leaves={self.leaf_count}, nodes={self.size}, root={self.root().hex()[:16]}...)"
