"""
Coordinate Transforms

Converts geometry between the coordinate spaces used by annotations:

    absolute     canvas pixels, origin top-left
    percentage   0-100 of the canvas width/height, origin top-left
    normalized   0-1 of the page width/height, origin top-left
    page points  PDF user space, origin bottom-left

Values never record which space they are in; the caller's context decides.
Non-positive dimensions are a caller error and raise ValueError. Nothing is
clamped.
"""
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Union


@dataclass(frozen=True)
class Point:
    """2D point"""
    x: float
    y: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Point":
        return cls(x=data["x"], y=data["y"])


@dataclass(frozen=True)
class Rect:
    """Rectangle given by its origin corner and size"""
    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Rect":
        return cls(x=data["x"], y=data["y"], width=data["width"], height=data["height"])


@dataclass(frozen=True)
class BoundingBox:
    """
    Rectangle given by two corners, in normalized (0-1) page coordinates

    Attributes:
        x1: Left edge
        y1: Top edge
        x2: Right edge
        y2: Bottom edge
    """
    x1: float
    y1: float
    x2: float
    y2: float

    @property
    def width(self) -> float:
        return self.x2 - self.x1

    @property
    def height(self) -> float:
        return self.y2 - self.y1

    def to_dict(self) -> Dict[str, float]:
        return {"x1": self.x1, "y1": self.y1, "x2": self.x2, "y2": self.y2}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "BoundingBox":
        return cls(x1=data["x1"], y1=data["y1"], x2=data["x2"], y2=data["y2"])


def _check_dimensions(width: float, height: float, what: str = "Canvas") -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"{what} dimensions must be positive, got {width}x{height}")


# --- Page (PDF) transforms ---

def normalized_to_points(box: BoundingBox, page_width: float, page_height: float) -> Rect:
    """
    Convert a normalized box to a rectangle in PDF page points.

    Page space has its origin at the bottom-left, normalized space at the
    top-left, so the returned ``y`` is the bottom edge of the box.

    Args:
        box: Bounding box in normalized coordinates (0-1)
        page_width: Page width in points
        page_height: Page height in points

    Returns:
        Rect in page points (origin bottom-left)
    """
    _check_dimensions(page_width, page_height, "Page")
    return Rect(
        x=box.x1 * page_width,
        y=page_height - box.y2 * page_height,
        width=(box.x2 - box.x1) * page_width,
        height=(box.y2 - box.y1) * page_height,
    )


def points_to_normalized(rect: Rect, page_width: float, page_height: float) -> BoundingBox:
    """
    Convert a rectangle in PDF page points back to a normalized box.

    Args:
        rect: Rect in page points (origin bottom-left)
        page_width: Page width in points
        page_height: Page height in points

    Returns:
        Bounding box in normalized coordinates (0-1)
    """
    _check_dimensions(page_width, page_height, "Page")
    y2 = (page_height - rect.y) / page_height
    return BoundingBox(
        x1=rect.x / page_width,
        y1=y2 - rect.height / page_height,
        x2=(rect.x + rect.width) / page_width,
        y2=y2,
    )


def normalize_rect(rect: Rect, page_width: float, page_height: float) -> BoundingBox:
    """
    Convert a pixel rectangle on a rendered page to a normalized box.

    Both spaces share a top-left origin, so no flip is applied.
    """
    _check_dimensions(page_width, page_height, "Page")
    return BoundingBox(
        x1=rect.x / page_width,
        y1=rect.y / page_height,
        x2=(rect.x + rect.width) / page_width,
        y2=(rect.y + rect.height) / page_height,
    )


def denormalize_rect(box: BoundingBox, page_width: float, page_height: float) -> Rect:
    """Convert a normalized box to pixels on a page rendered at the given size."""
    _check_dimensions(page_width, page_height, "Page")
    return Rect(
        x=box.x1 * page_width,
        y=box.y1 * page_height,
        width=(box.x2 - box.x1) * page_width,
        height=(box.y2 - box.y1) * page_height,
    )


def normalize_rects(rects: Iterable[Rect], page_width: float, page_height: float) -> List[BoundingBox]:
    """Normalize the rectangles of a multi-line selection"""
    return [normalize_rect(r, page_width, page_height) for r in rects]


def denormalize_rects(boxes: Iterable[BoundingBox], page_width: float, page_height: float) -> List[Rect]:
    """Denormalize the boxes of a multi-line selection"""
    return [denormalize_rect(b, page_width, page_height) for b in boxes]


# --- Canvas (image / shape overlay) transforms ---

def absolute_to_percentage(point: Point, canvas_width: float, canvas_height: float) -> Point:
    """Convert a pixel point to percentage (0-100) of the canvas"""
    _check_dimensions(canvas_width, canvas_height)
    return Point(
        x=(point.x / canvas_width) * 100,
        y=(point.y / canvas_height) * 100,
    )


def percentage_to_absolute(point: Point, canvas_width: float, canvas_height: float) -> Point:
    """Convert a percentage (0-100) point to canvas pixels"""
    _check_dimensions(canvas_width, canvas_height)
    return Point(
        x=(point.x / 100) * canvas_width,
        y=(point.y / 100) * canvas_height,
    )


def absolute_rect_to_percentage(rect: Rect, canvas_width: float, canvas_height: float) -> Rect:
    """Convert a pixel rectangle to percentage (0-100) of the canvas"""
    _check_dimensions(canvas_width, canvas_height)
    return Rect(
        x=(rect.x / canvas_width) * 100,
        y=(rect.y / canvas_height) * 100,
        width=(rect.width / canvas_width) * 100,
        height=(rect.height / canvas_height) * 100,
    )


def percentage_rect_to_absolute(rect: Rect, canvas_width: float, canvas_height: float) -> Rect:
    """Convert a percentage (0-100) rectangle to canvas pixels"""
    _check_dimensions(canvas_width, canvas_height)
    return Rect(
        x=(rect.x / 100) * canvas_width,
        y=(rect.y / 100) * canvas_height,
        width=(rect.width / 100) * canvas_width,
        height=(rect.height / 100) * canvas_height,
    )


# --- Geometry helpers ---

def calculate_bounding_box(rects: List[Rect]) -> Rect:
    """
    Get the smallest rectangle containing all given rectangles.

    Returns a zero rectangle for an empty list.
    """
    if not rects:
        return Rect(0, 0, 0, 0)

    min_x = min(r.x for r in rects)
    min_y = min(r.y for r in rects)
    max_x = max(r.x + r.width for r in rects)
    max_y = max(r.y + r.height for r in rects)
    return Rect(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)


def is_point_in_rect(point: Point, rect: Rect) -> bool:
    """Check if a point lies inside a rectangle (edges included)"""
    return (
        rect.x <= point.x <= rect.x + rect.width
        and rect.y <= point.y <= rect.y + rect.height
    )


def round_trip_tolerance(*dimensions: float) -> float:
    """Tolerance for comparing values after a transform round trip"""
    return 1e-4 * max(dimensions)


def approx_equal(a: float, b: float, tolerance: float = 1e-4) -> bool:
    return abs(a - b) <= tolerance


def rects_approx_equal(
    a: Union[Rect, BoundingBox],
    b: Union[Rect, BoundingBox],
    tolerance: float = 1e-4,
) -> bool:
    """Compare two rectangles of the same kind field by field"""
    if type(a) is not type(b):
        raise TypeError(f"Cannot compare {type(a).__name__} with {type(b).__name__}")
    return all(
        approx_equal(va, vb, tolerance)
        for va, vb in zip(a.to_dict().values(), b.to_dict().values())
    )
