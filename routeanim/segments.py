"""Map path indices to the transport-mode leg they belong to."""
from __future__ import annotations

import bisect
from typing import Optional, Tuple

from .route import DensePath, LegRange, TransportMode


def leg_range_at(path: DensePath, path_index: int) -> LegRange:
    """Return the leg range containing ``path_index``, clamping out-of-range indices."""

    ranges = path.leg_ranges
    starts = [leg_range.start_index for leg_range in ranges]
    position = bisect.bisect_right(starts, path_index) - 1
    return ranges[min(max(position, 0), len(ranges) - 1)]


def leg_index_at(path: DensePath, path_index: int) -> int:
    return leg_range_at(path, path_index).leg_index


def mode_at(path: DensePath, path_index: int) -> TransportMode:
    return leg_range_at(path, path_index).mode


def did_cross_boundary(prev_index: int, new_index: int, path: DensePath) -> bool:
    """True when moving between the indices changes the active transport mode."""

    return mode_at(path, prev_index) is not mode_at(path, new_index)


class SegmentTracker:
    """Remember the last active mode so a marker icon is only swapped on a real transition."""

    def __init__(self, path: DensePath) -> None:
        self.path = path
        self._last_index: Optional[int] = None

    @property
    def last_index(self) -> Optional[int]:
        return self._last_index

    def update(self, path_index: int) -> Tuple[TransportMode, bool]:
        """Return the mode at ``path_index`` and whether it differs from the previous update."""

        mode = mode_at(self.path, path_index)
        if self._last_index is None:
            changed = True
        else:
            changed = did_cross_boundary(self._last_index, path_index, self.path)
        self._last_index = path_index
        return mode, changed

    def reset(self) -> None:
        self._last_index = None
