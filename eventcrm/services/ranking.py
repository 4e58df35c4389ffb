"""Integer fractional ranks for drag-and-drop ordering.

Ranks are plain Python ints. Inserting between two neighbours takes the
floor of their mean, so a pair of neighbours needs a gap of at least
``MIN_GAP`` for a new rank to fit strictly between them. Callers check
``needs_rebalance`` first and renumber the list with ``spread_ranks``
when the gap has collapsed.
"""

STEP = 1_000_000
MIN_GAP = 2


def compute_rank(left: int | None = None, right: int | None = None) -> int:
    if left is None and right is None:
        return STEP
    if left is None:
        return right - STEP
    if right is None:
        return left + STEP
    return (left + right) // 2


def needs_rebalance(left: int | None, right: int | None) -> bool:
    if left is None or right is None:
        return False
    return right - left < MIN_GAP


def spread_ranks(count: int, step: int = STEP) -> list[int]:
    return [step * (index + 1) for index in range(count)]
