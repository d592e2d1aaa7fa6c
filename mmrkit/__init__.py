"""
mmrkit - Merkle Mountain Range index arithmetic and append-only storage.

mmrkit provides:
- Pure position navigation (peaks, heights, families, proof paths)
- Append-only backing stores (in-memory and JSON-lines file)
- A SHA-256 MMR driver computing roots and inclusion paths
"""

from .navigation import (
    U64_MAX,
    peaks,
    is_stable,
    node_height,
    is_leaf,
    peak_height_map,
    is_left,
    family,
    family_path,
    leaf_count,
    leaf_index_to_pos,
)
from .errors import (
    MMRError,
    StoreError,
    MissingHashError,
    StoreWriteError,
    StoreCorruptedError,
)
from .store import Store, MemoryStore, FileStore, open_store
from .mmr import (
    MerkleMountainRange,
    MembershipProof,
    hash_leaf,
    hash_internal,
    EMPTY_HASH,
    HASH_SIZE,
)
from .config import (
    MMRConfig,
    StoreConfig,
    LoggingConfig,
    get_config,
    set_config,
    reset_config,
)
from .observability import setup_logging, get_logger

__all__ = [
    # Navigation
    "U64_MAX",
    "peaks",
    "is_stable",
    "node_height",
    "is_leaf",
    "peak_height_map",
    "is_left",
    "family",
    "family_path",
    "leaf_count",
    "leaf_index_to_pos",
    # Errors
    "MMRError",
    "StoreError",
    "MissingHashError",
    "StoreWriteError",
    "StoreCorruptedError",
    # Stores
    "Store",
    "MemoryStore",
    "FileStore",
    "open_store",
    # MMR
    "MerkleMountainRange",
    "MembershipProof",
    "hash_leaf",
    "hash_internal",
    "EMPTY_HASH",
    "HASH_SIZE",
    # Config
    "MMRConfig",
    "StoreConfig",
    "LoggingConfig",
    "get_config",
    "set_config",
    "reset_config",
    # Observability
    "setup_logging",
    "get_logger",
]

__version__ = "0.1.0"
