"""
Median-cut color quantization.

Samples are tallied into a reduced-precision RGB histogram (5 bits per channel
by default). Starting from the box that bounds every occupied histogram cell,
the box with the largest population * volume is repeatedly cut in two along
its widest axis at the population median, until the requested number of boxes
exists or no box can be cut any further. Each remaining box contributes its
average color to the palette.

Box averages are the exact mean of the 8-bit samples inside the box, taken
from per-cell channel sums, rather than the mean of cell centers
((coord + 0.5) * 2**shift). Cell centers would move a single repeated color
by up to half a reduction step.
"""

import math

import numpy as np

DEFAULT_PRECISION = 5
MIN_COLORS = 2
MAX_COLORS = 256
MAX_BOXES = 1024

RED, GREEN, BLUE = 0, 1, 2


def _round_channel(value: float) -> int:
    """Round half-up and clamp to the 0-255 channel range."""
    return int(min(255, max(0, math.floor(value + 0.5))))


class Histogram:
    """
    Dense count of samples per reduced (r, g, b) cell.

    The arrays are read-only once built: every ColorBox cut from this
    histogram holds a reference to the same instance.
    """

    def __init__(self, samples, precision: int = DEFAULT_PRECISION):
        if not 1 <= precision <= 8:
            raise ValueError(f"precision must be between 1 and 8 bits, got {precision}")

        self.precision = precision
        self.shift = 8 - precision
        self.size = 1 << precision

        pixels = np.asarray(samples, dtype=np.int64)
        if not pixels.size:
            pixels = pixels.reshape(0, 3)
        if pixels.ndim != 2 or pixels.shape[1] != 3:
            raise ValueError(f"samples must be (r, g, b) triples, got shape {pixels.shape}")
        if pixels.size and (pixels.min() < 0 or pixels.max() > 255):
            raise ValueError("sample channels must be integers in [0, 255]")

        reduced = pixels >> self.shift
        index = (reduced[:, RED] << (2 * precision)) + (reduced[:, GREEN] << precision) + reduced[:, BLUE]
        cells = self.size ** 3
        shape = (self.size, self.size, self.size)

        self.counts = np.bincount(index, minlength=cells).astype(np.int64).reshape(shape)
        # Channel sums of the original 8-bit values, for exact box averages
        self.sums = np.stack(
            [np.bincount(index, weights=pixels[:, c], minlength=cells) for c in (RED, GREEN, BLUE)],
            axis=-1,
        ).reshape(shape + (3,))
        self.counts.flags.writeable = False
        self.sums.flags.writeable = False

        self.total = len(pixels)
        if self.total:
            self.lower = tuple(int(v) for v in reduced.min(axis=0))
            self.upper = tuple(int(v) for v in reduced.max(axis=0))
        else:
            self.lower = self.upper = None

    def initial_box(self) -> "ColorBox | None":
        """Box spanning the observed bounds, or None when no samples were seen."""
        if not self.total:
            return None
        return ColorBox(
            self.lower[RED], self.upper[RED],
            self.lower[GREEN], self.upper[GREEN],
            self.lower[BLUE], self.upper[BLUE],
            self,
        )


class ColorBox:
    """Axis-aligned closed range of reduced color space over a shared histogram."""

    __slots__ = ("r1", "r2", "g1", "g2", "b1", "b2", "histogram")

    def __init__(self, r1: int, r2: int, g1: int, g2: int, b1: int, b2: int, histogram: Histogram):
        if r1 > r2 or g1 > g2 or b1 > b2:
            raise ValueError(f"inverted box range: r[{r1},{r2}] g[{g1},{g2}] b[{b1},{b2}]")
        self.r1, self.r2 = r1, r2
        self.g1, self.g2 = g1, g2
        self.b1, self.b2 = b1, b2
        self.histogram = histogram

    def __repr__(self) -> str:
        return f"ColorBox(r[{self.r1},{self.r2}] g[{self.g1},{self.g2}] b[{self.b1},{self.b2}])"

    def axis_range(self, axis: int) -> tuple[int, int]:
        return ((self.r1, self.r2), (self.g1, self.g2), (self.b1, self.b2))[axis]

    def with_range(self, axis: int, lo: int, hi: int) -> "ColorBox":
        """Copy of this box with one axis replaced by [lo, hi]."""
        ranges = [self.axis_range(a) for a in (RED, GREEN, BLUE)]
        ranges[axis] = (lo, hi)
        (r1, r2), (g1, g2), (b1, b2) = ranges
        return ColorBox(r1, r2, g1, g2, b1, b2, self.histogram)

    def extents(self) -> tuple[int, int, int]:
        return (self.r2 - self.r1 + 1, self.g2 - self.g1 + 1, self.b2 - self.b1 + 1)

    def _slices(self) -> tuple[slice, slice, slice]:
        return (slice(self.r1, self.r2 + 1), slice(self.g1, self.g2 + 1), slice(self.b1, self.b2 + 1))

    def cell_counts(self) -> np.ndarray:
        """Read-only view of the histogram cells inside the box."""
        return self.histogram.counts[self._slices()]

    def volume(self) -> int:
        r, g, b = self.extents()
        return r * g * b

    def population(self) -> int:
        return int(self.cell_counts().sum())

    def priority(self) -> int:
        return self.population() * self.volume()

    def average_color(self) -> tuple[int, int, int]:
        """
        Mean color of the samples that fell inside the box.

        Channels are rounded half-up and clamped to [0, 255]; an empty box
        averages to black.
        """
        population = self.population()
        if not population:
            return (0, 0, 0)
        sums = self.histogram.sums[self._slices()].reshape(-1, 3).sum(axis=0)
        return tuple(_round_channel(s / population) for s in sums)


def median_cut_split(box: ColorBox) -> "tuple[ColorBox, ColorBox] | None":
    """
    Cut a box in two along its widest axis at the population median.

    Returns None when the box is empty or is a single histogram cell.
    """
    counts = box.cell_counts()
    total = int(counts.sum())
    if not total:
        return None

    extents = box.extents()
    # First widest axis wins ties: red, then green, then blue
    axis = extents.index(max(extents))
    length = extents[axis]
    if length == 1:
        return None

    others = tuple(a for a in (RED, GREEN, BLUE) if a != axis)
    partials = np.cumsum(counts.sum(axis=others))

    reached = np.flatnonzero(partials >= total / 2)
    split = int(reached[0]) if reached.size else length // 2
    # Both halves must keep at least one slice
    split = min(split, length - 2)

    start, end = box.axis_range(axis)
    return (
        box.with_range(axis, start, start + split),
        box.with_range(axis, start + split + 1, end),
    )


class ColorMap:
    """Result of a quantization run."""

    def __init__(self, boxes: list[ColorBox], max_colors: int):
        self.boxes = boxes
        self.max_colors = max_colors

    def palette(self) -> list[tuple[int, int, int]]:
        """Average color of every box, in queue order. Empty boxes give black."""
        return [box.average_color() for box in self.boxes][:self.max_colors]


def quantize(samples, max_colors: int, precision: int = DEFAULT_PRECISION) -> ColorMap:
    """
    Reduce a multiset of RGB samples to at most max_colors representative colors.

    Args:
        samples: Sequence of (r, g, b) triples or an (N, 3) array, channels in [0, 255]
        max_colors: Requested palette size, 2-256; anything else yields an empty palette
        precision: Histogram bits per channel

    Returns:
        ColorMap whose palette() holds the representative colors
    """
    if not MIN_COLORS <= max_colors <= MAX_COLORS:
        return ColorMap([], max_colors)

    histogram = Histogram(samples, precision)
    initial = histogram.initial_box()
    if initial is None:
        return ColorMap([], max_colors)

    boxes = [initial]
    while len(boxes) < max_colors:
        # Populations only change through splitting, so priorities are recomputed each pass
        boxes.sort(key=ColorBox.priority, reverse=True)
        box = boxes.pop(0)

        if not box.population():
            boxes.append(box)
            break

        halves = median_cut_split(box)
        if halves is None:
            boxes.append(box)
            break

        boxes.extend(halves)
        if len(boxes) > MAX_BOXES:
            break

    return ColorMap(boxes, max_colors)
