"""
Detection data transfer objects.

This module defines the two value types produced by the decoding engine:

    - Box: an integer, axis-aligned pixel rectangle with the small amount
      of geometry the suppressor needs (area and intersection).
    - Detection: a labeled, scored box. The decoder emits candidates and
      the suppressor returns the survivors; both share this record.

Non-goals:
    - No rendering logic.
    - No file I/O.
    - No clamping to the image frame. Boxes may extend past the edges.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Box:
    """Axis-aligned rectangle in absolute pixel coordinates.

    Attributes:
        x1: Left edge (inclusive).
        y1: Top edge (inclusive).
        x2: Right edge (exclusive).
        y2: Bottom edge (exclusive).

    Boxes are always canonical (x1 <= x2 and y1 <= y2); the constructor
    rejects inverted corners. Use Box.from_corners() to build a box from
    arbitrary corners.
    """

    x1: int
    y1: int
    x2: int
    y2: int

    def __post_init__(self) -> None:
        if self.x1 > self.x2 or self.y1 > self.y2:
            raise ValueError(
                f"Inverted box corners {self}; use Box.from_corners() "
                f"to order arbitrary corners."
            )

    @classmethod
    def from_corners(cls, x0: int, y0: int, x1: int, y1: int) -> "Box":
        """Build a canonical box from two opposite corners."""
        if x0 > x1:
            x0, x1 = x1, x0
        if y0 > y1:
            y0, y1 = y1, y0
        return cls(int(x0), int(y0), int(x1), int(y1))

    @property
    def width(self) -> int:
        """Box width in pixels."""
        return self.x2 - self.x1

    @property
    def height(self) -> int:
        """Box height in pixels."""
        return self.y2 - self.y1

    @property
    def area(self) -> int:
        """Box area in pixels."""
        return self.width * self.height

    def is_empty(self) -> bool:
        """True if the box contains no pixels."""
        return self.x1 >= self.x2 or self.y1 >= self.y2

    def intersect(self, other: "Box") -> "Box":
        """Return the largest box contained by both boxes.

        Disjoint or merely touching boxes yield the zero box, so the
        area of the result is always >= 0.
        """
        x1 = max(self.x1, other.x1)
        y1 = max(self.y1, other.y1)
        x2 = min(self.x2, other.x2)
        y2 = min(self.y2, other.y2)
        if x1 >= x2 or y1 >= y2:
            return EMPTY_BOX
        return Box(x1, y1, x2, y2)

    def __str__(self) -> str:
        return f"({self.x1},{self.y1})-({self.x2},{self.y2})"


EMPTY_BOX = Box(0, 0, 0, 0)


@dataclass(frozen=True, slots=True)
class Detection:
    """A single labeled detection.

    Attributes:
        class_id: Index into the label list.
        class_name: Label for class_id.
        confidence: Best class score for the originating row.
        box: Bounding box in absolute pixels (not clamped).

    Records are hashable, so decoded candidates can be compared as sets.
    """

    class_id: int
    class_name: str
    confidence: float
    box: Box

    def to_dict(self) -> dict:
        """Return a plain dict suitable for JSON serialization."""
        return {
            "class_id": self.class_id,
            "class_name": self.class_name,
            "confidence": round(self.confidence, 4),
            "x1": self.box.x1,
            "y1": self.box.y1,
            "x2": self.box.x2,
            "y2": self.box.y2,
        }

    def __str__(self) -> str:
        return (
            f"Detected {self.class_id}: {self.class_name}, "
            f"Confidence: {self.confidence * 100:.2f}%, Bbox: {self.box}"
        )


# Decoder output, before suppression.
DetectionCandidate = Detection
