# core/quantile_sketch.py
"""
╔════════════════════════════════════════════════════════════════════════════╗
║  CleanMissingData — Approximate Quantile Summary                          ║
║  ─────────────────────────────────────────────────────────────────────────  ║
║  ✓ Single Pass, Bounded Memory                                           ║
║  ✓ Greenwald-Khanna Style Samples (value, g, delta)                      ║
║  ✓ Mergeable Across Partitions                                           ║
╚════════════════════════════════════════════════════════════════════════════╝

Every sample stores ``g`` (rank distance to the previous sample) and
``delta`` (uncertainty of its maximum rank). A query for quantile ``q`` over
``n`` values returns a value whose rank is within ``relative_error * n`` of
``ceil(q * n)``. As long as no compression has happened (small inputs) the
summary is exact.

Usage:
```python
    summary = QuantileSummary(relative_error=0.001)
    summary.update(values)
    other.update(more_values)

    median = summary.merge(other).query(0.5)
```
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, List, Optional

import numpy as np

from config.settings import settings

__all__ = ["QuantileSummary"]


@dataclass
class _Sample:
    value: float
    g: int
    delta: int


def _compress_samples(samples: List[_Sample], merge_threshold: int) -> List[_Sample]:
    """Merge adjacent samples while their combined rank band stays under the threshold."""
    if not samples:
        return []

    kept: List[_Sample] = []
    head = samples[-1]

    # The first sample is never absorbed so the minimum stays exact
    for i in range(len(samples) - 2, 0, -1):
        sample = samples[i]
        if sample.g + head.g + head.delta < merge_threshold:
            head = _Sample(head.value, head.g + sample.g, head.delta)
        else:
            kept.append(head)
            head = sample

    kept.append(head)

    first = samples[0]
    if len(samples) > 1 and first.value <= head.value:
        kept.append(first)

    kept.reverse()
    return kept


class QuantileSummary:
    """
    📊 **Mergeable Approximate Quantile Summary**

    Args:
        relative_error: Target rank error as a fraction of the count
        compress_threshold: Compress once this many samples are held
        head_size: Number of raw values buffered before a sorted merge
    """

    def __init__(
        self,
        relative_error: Optional[float] = None,
        compress_threshold: Optional[int] = None,
        head_size: Optional[int] = None
    ):
        self.relative_error = float(
            settings.MEDIAN_RELATIVE_ERROR if relative_error is None else relative_error
        )
        if not 0.0 < self.relative_error < 1.0:
            raise ValueError(
                f"relative_error must be in (0, 1), got {self.relative_error}"
            )

        self.compress_threshold = int(compress_threshold or settings.SKETCH_COMPRESS_THRESHOLD)
        self.head_size = int(head_size or settings.SKETCH_HEAD_SIZE)

        self.count = 0
        self._head: List[float] = []
        self._samples: List[_Sample] = []

    # ───────────────────────────────────────────────────────────────────
    # Inserts
    # ───────────────────────────────────────────────────────────────────

    def insert(self, value: float) -> None:
        """Add a single non-null value."""
        self._head.append(float(value))

        if len(self._head) >= self.head_size:
            self._flush_head()
            if len(self._samples) >= self.compress_threshold:
                self.compress()

    def update(self, values: Iterable[float]) -> "QuantileSummary":
        """Add many values; NaN entries are ignored."""
        arr = np.asarray(values, dtype="float64").ravel()
        arr = arr[~np.isnan(arr)]

        start = 0
        while start < arr.size:
            room = self.head_size - len(self._head)
            chunk = arr[start:start + room]
            self._head.extend(chunk.tolist())
            start += chunk.size

            if len(self._head) >= self.head_size:
                self._flush_head()
                if len(self._samples) >= self.compress_threshold:
                    self.compress()

        return self

    def _flush_head(self) -> None:
        if not self._head:
            return

        sorted_head = sorted(self._head)
        samples = self._samples
        merged: List[_Sample] = []
        sample_idx = 0
        last_op = len(sorted_head) - 1

        for op_idx, current in enumerate(sorted_head):
            while sample_idx < len(samples) and samples[sample_idx].value <= current:
                merged.append(samples[sample_idx])
                sample_idx += 1

            # New extremes are known exactly
            if not merged or (sample_idx == len(samples) and op_idx == last_op):
                delta = 0
            else:
                delta = int(math.floor(2 * self.relative_error * self.count))

            merged.append(_Sample(current, 1, delta))
            self.count += 1

        merged.extend(samples[sample_idx:])
        self._samples = merged
        self._head = []

    # ───────────────────────────────────────────────────────────────────
    # Compression / Merge
    # ───────────────────────────────────────────────────────────────────

    def compress(self) -> "QuantileSummary":
        """Flush buffered values and shrink the sample list."""
        self._flush_head()
        merge_threshold = int(math.floor(2 * self.relative_error * self.count))
        self._samples = _compress_samples(self._samples, merge_threshold)
        return self

    def merge(self, other: "QuantileSummary") -> "QuantileSummary":
        """Return a new summary covering the values of both summaries."""
        self.compress()
        other.compress()

        result = QuantileSummary(
            relative_error=max(self.relative_error, other.relative_error),
            compress_threshold=self.compress_threshold,
            head_size=self.head_size
        )

        if other.count == 0:
            result._samples = list(self._samples)
            result.count = self.count
            return result

        if self.count == 0:
            result._samples = list(other._samples)
            result.count = other.count
            return result

        combined = sorted(self._samples + other._samples, key=lambda s: s.value)
        result.count = self.count + other.count
        merge_threshold = int(math.floor(2 * result.relative_error * result.count))
        result._samples = _compress_samples(combined, merge_threshold)
        return result

    # ───────────────────────────────────────────────────────────────────
    # Queries
    # ───────────────────────────────────────────────────────────────────

    @property
    def sample_count(self) -> int:
        """Number of retained samples (memory footprint)."""
        return len(self._samples) + len(self._head)

    def query(self, quantile: float) -> Optional[float]:
        """
        Approximate value at ``quantile``.

        Returns None when no value has been inserted.
        """
        if not 0.0 <= quantile <= 1.0:
            raise ValueError(f"quantile must be in [0, 1], got {quantile}")

        self._flush_head()
        samples = self._samples

        if not samples:
            return None

        if quantile <= self.relative_error:
            return samples[0].value

        if quantile >= 1.0 - self.relative_error:
            return samples[-1].value

        rank = math.ceil(quantile * self.count)
        target_error = max(s.g + s.delta for s in samples) // 2

        min_rank = 0
        for sample in samples[:-1]:
            min_rank += sample.g
            max_rank = min_rank + sample.delta
            if max_rank - target_error <= rank <= min_rank + target_error:
                return sample.value

        return samples[-1].value

    def __repr__(self) -> str:
        return (
            f"QuantileSummary(relative_error={self.relative_error}, "
            f"count={self.count}, samples={self.sample_count})"
        )
