"""
Position arithmetic for Merkle Mountain Ranges.

Nodes are addressed by their 1-based postorder position across the whole
forest. Every function here is a pure computation over integers: no store
access, no hashing, no shared state.

Example forest of size 19::

                   15
                /      \\
               7        14
             /   \\     /   \\
            3     6   10    13       18
           / \\   / \\  / \\  / \\     /  \\
          1   2 4  5 8  9 11 12  16  17  19

    peaks(19) == [15, 18, 19]

Positions are treated as unsigned 64-bit values. Inputs at the degenerate
end of the range (0, negatives) yield empty or zero results instead of
raising, so callers can pass ``pos - 1`` without guarding.
"""

from __future__ import annotations

from typing import List, Tuple

# 0b1111...1 across 64 bits
U64_MAX = (1 << 64) - 1


def _ladder(value: int) -> int:
    """All-ones mask covering the significant bits of ``value``."""
    return (1 << value.bit_length()) - 1


def peaks(size: int) -> List[int]:
    """
    Return the positions of all peaks for a MMR with ``size`` nodes.

    Peaks are listed left to right; the leftmost peak is always the highest.
    An unstable size (one that leaves a subtree half built, e.g. two
    orphaned leaves) yields an empty list, as does ``size == 0``.
    """
    if size <= 0:
        return []

    peak_idx = _ladder(size)
    nodes_left = size
    prev_peak = 0
    result: List[int] = []

    while peak_idx != 0:
        if nodes_left >= peak_idx:
            prev_peak += peak_idx
            result.append(prev_peak)
            nodes_left -= peak_idx
        peak_idx >>= 1

    # leftover nodes mean a subtree is still under construction
    if nodes_left > 0:
        return []

    return result


def is_stable(size: int) -> bool:
    """True if ``size`` describes a complete forest (including the empty one)."""
    return size == 0 or bool(peaks(size))


def node_height(pos: int) -> int:
    """
    Return the height of the node at ``pos``.

    Computed as if the node sits in an infinitely large perfect binary tree
    visited in postorder. Leaves are at height 0.
    """
    idx = max(pos - 1, 0)
    if idx == 0:
        return 0

    peak_idx = _ladder(idx)
    while peak_idx != 0:
        if idx >= peak_idx:
            idx -= peak_idx
        peak_idx >>= 1

    return idx


def is_leaf(pos: int) -> bool:
    """True if the node at ``pos`` is a leaf."""
    return node_height(pos) == 0


def peak_height_map(idx: int) -> Tuple[int, int]:
    """
    Return ``(peak_map, height)`` for the node at 0-based index ``idx``.

    ``peak_map`` has bit ``h`` set for every peak of height ``h`` that exists
    **before** the node is added; ``height`` is the height the node itself
    will be placed at.

    For example ``peak_height_map(4) == (0b11, 0)``: four nodes form one peak
    of height 1 and one of height 0, and the fifth node is a leaf::

           2
          / \\
         0   1   3
    """
    if idx <= 0:
        return 0, 0

    peak_idx = _ladder(idx)
    peak_map = 0

    while peak_idx != 0:
        peak_map <<= 1
        if idx >= peak_idx:
            idx -= peak_idx
            peak_map |= 1
        peak_idx >>= 1

    return peak_map, idx


def is_left(pos: int) -> bool:
    """True if the node at ``pos`` is the left child of its parent."""
    peak_map, height = peak_height_map(max(pos - 1, 0))
    peak = 1 << height
    return (peak_map & peak) == 0


def family(pos: int) -> Tuple[int, int]:
    """
    Return ``(parent, sibling)`` positions for the node at ``pos``.

    The sibling is the left one when ``pos`` is a right child and the right
    one otherwise. Position 0 has no family and yields ``(0, 0)``.
    """
    if pos <= 0:
        return 0, 0

    peak_map, height = peak_height_map(pos - 1)
    peak = 1 << height

    if peak_map & peak:
        return pos + 1, pos + 1 - 2 * peak
    return pos + 2 * peak, pos + 2 * peak - 1


def family_path(pos: int, end_pos: int) -> List[Tuple[int, int]]:
    """
    Return the ``(parent, sibling)`` pairs from ``pos`` up to ``end_pos``.

    The path holds every sibling needed to rebuild the hash of the peak
    enclosing ``pos`` in a MMR of ``end_pos`` nodes, so it can be used for
    membership proofs against historical sizes. Walking stops, without
    error, at the first parent that would lie beyond ``end_pos``.

    For the forest in the module docstring::

        family_path(8, 15) == [(10, 9), (14, 13), (15, 7)]
    """
    path: List[Tuple[int, int]] = []
    if pos <= 0:
        return path

    peak_map, height = peak_height_map(pos - 1)
    parent_height = 1 << height
    node_pos = pos

    while node_pos < end_pos:
        if peak_map & parent_height:
            node_pos += 1
            sibling = node_pos - 2 * parent_height
        else:
            node_pos += 2 * parent_height
            sibling = node_pos - 1

        if node_pos > end_pos:
            break

        path.append((node_pos, sibling))
        parent_height <<= 1

    return path


def leaf_count(size: int) -> int:
    """Number of leaves in a stable MMR of ``size`` nodes, 0 if unstable."""
    return sum(1 << node_height(p) for p in peaks(size))


def leaf_index_to_pos(index: int) -> int:
    """Position of the leaf with 0-based insertion ``index`` (0 if negative)."""
    if index < 0:
        return 0
    return 2 * index - bin(index).count("1") + 1
