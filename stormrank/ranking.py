"""
Ranking and ordering primitives
===============================

Ranks must be reproducible: two event types with the same total keep the
order in which they were first seen. A plain merge sort gives that as long
as ties always take the element from the left half, in both directions.
"""

from __future__ import annotations
from typing import Callable, Dict, List, Sequence, TypeVar

T = TypeVar("T")

def stable_sort(items: Sequence[T], key: Callable[[T], float], descending: bool = True) -> List[T]:
    """Stable merge sort; equal keys keep their input order."""
    if len(items) <= 1:
        return list(items)
    mid = len(items) // 2
    left = stable_sort(items[:mid], key, descending)
    right = stable_sort(items[mid:], key, descending)
    return _merge(left, right, key, descending)

def _merge(left: List[T], right: List[T], key: Callable[[T], float], descending: bool) -> List[T]:
    out: List[T] = []
    i = j = 0
    while i < len(left) and j < len(right):
        a, b = key(left[i]), key(right[j])
        # ">=" / "<=" keeps ties on the left side
        take_left = (a >= b) if descending else (a <= b)
        if take_left:
            out.append(left[i]); i += 1
        else:
            out.append(right[j]); j += 1
    out.extend(left[i:])
    out.extend(right[j:])
    return out

def assign_ranks(labels: Sequence[str], values: Sequence[float]) -> Dict[str, int]:
    """Rank labels by value, 1 = largest; ties broken by position in `labels`.

    The result is always a permutation of 1..len(labels).
    """
    order = stable_sort(list(range(len(labels))), key=lambda i: values[i])
    return {labels[i]: pos + 1 for pos, i in enumerate(order)}

def intersect_sorted(a: Sequence[int], b: Sequence[int]) -> List[int]:
    """Common elements of two ascending ID lists, in one linear walk."""
    out: List[int] = []
    i = j = 0
    while i < len(a) and j < len(b):
        if a[i] < b[j]:
            i += 1
        elif a[i] > b[j]:
            j += 1
        else:
            out.append(a[i]); i += 1; j += 1
    return out
