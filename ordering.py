from collections import deque
from typing import Any, Callable, List, MutableSequence


def quick_sort(items: MutableSequence, less: Callable[[Any, Any], bool]) -> None:
    """
    In-place partition-exchange sort with a middle pivot.
    `less(a, b)` must be a strict weak ordering. Not stable.
    Partitions are kept on an explicit work-list instead of the call stack.
    """
    work: List[tuple] = [(0, len(items) - 1)]
    while work:
        lo, hi = work.pop()
        if lo >= hi:
            continue

        mid = (lo + hi) // 2
        pivot = items[mid]
        items[mid], items[hi] = items[hi], items[mid] # park pivot at the end

        store = lo
        for i in range(lo, hi):
            if less(items[i], pivot):
                items[i], items[store] = items[store], items[i]
                store += 1
        items[store], items[hi] = items[hi], items[store]

        # Larger half first so the smaller half is handled next
        if store - lo > hi - store:
            work.append((lo, store - 1))
            work.append((store + 1, hi))
        else:
            work.append((store + 1, hi))
            work.append((lo, store - 1))


def take_min(first: deque, second: deque, key: Callable[[Any], Any]):
    # Both queues must already be non-decreasing by key.
    # On a tie the second queue wins.
    if not first and not second:
        raise IndexError("take_min from two empty queues")
    if not first:
        return second.popleft()
    if not second:
        return first.popleft()
    if key(second[0]) <= key(first[0]):
        return second.popleft()
    return first.popleft()
