"""
Shape Serialization

Freeform vector overlays drawn on raster images are persisted in percentage
space so they can be restored on a canvas of any size. A shape's position is
converted, as are numeric ``w``/``h`` entries of its property bag; every
other property is deep-copied untouched.

Shape order is paint order and is never changed.
"""
import copy
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence

from PIL import Image

from .config import DEFAULT_SHAPE_SIZE, SHAPE_DATA_VERSION
from .coordinates import Rect, _check_dimensions
from .validation import is_number, is_valid_shape_data

logger = logging.getLogger(__name__)

_DIMENSION_PROPS = ("w", "h")


@dataclass(frozen=True)
class ShapeRecord:
    """
    One overlay shape. Coordinates are absolute pixels or percentages
    depending on which side of serialization the record is on.
    """
    id: str
    type: str
    x: float
    y: float
    props: Dict[str, Any] = field(default_factory=dict)
    rotation: Optional[float] = None
    is_locked: Optional[bool] = None
    opacity: Optional[float] = None

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "type": self.type,
            "x": self.x,
            "y": self.y,
            "props": copy.deepcopy(self.props),
        }
        if self.rotation is not None:
            data["rotation"] = self.rotation
        if self.is_locked is not None:
            data["isLocked"] = self.is_locked
        if self.opacity is not None:
            data["opacity"] = self.opacity
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShapeRecord":
        return cls(
            id=data["id"],
            type=data["type"],
            x=data["x"],
            y=data["y"],
            props=copy.deepcopy(data["props"]),
            rotation=data.get("rotation"),
            is_locked=data.get("isLocked"),
            opacity=data.get("opacity"),
        )


@dataclass(frozen=True)
class ShapeData:
    """Shape sidecar: percentage-space shapes plus the source image size"""
    VERSION = SHAPE_DATA_VERSION
    shapes: List[ShapeRecord]
    image_width: float
    image_height: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.VERSION,
            "shapes": [s.to_dict() for s in self.shapes],
            "imageWidth": self.image_width,
            "imageHeight": self.image_height,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ShapeData":
        return cls(
            shapes=[ShapeRecord.from_dict(s) for s in data["shapes"]],
            image_width=data["imageWidth"],
            image_height=data["imageHeight"],
        )


def _scale_props(props: Dict[str, Any], scale_w: float, scale_h: float) -> Dict[str, Any]:
    scaled = copy.deepcopy(props)
    for key, scale in zip(_DIMENSION_PROPS, (scale_w, scale_h)):
        if is_number(scaled.get(key)):
            scaled[key] = scaled[key] * scale
    return scaled


def shape_to_percentage(shape: ShapeRecord, image_width: float, image_height: float) -> ShapeRecord:
    """Convert a shape's absolute pixel geometry to percentages of the image"""
    _check_dimensions(image_width, image_height, "Image")
    return ShapeRecord(
        id=shape.id,
        type=shape.type,
        x=(shape.x / image_width) * 100,
        y=(shape.y / image_height) * 100,
        props=_scale_props(shape.props, 100 / image_width, 100 / image_height),
        rotation=shape.rotation,
        is_locked=shape.is_locked,
        opacity=shape.opacity,
    )


def shape_to_absolute(shape: ShapeRecord, canvas_width: float, canvas_height: float) -> ShapeRecord:
    """Convert a shape's percentage geometry to pixels on the given canvas"""
    _check_dimensions(canvas_width, canvas_height)
    return ShapeRecord(
        id=shape.id,
        type=shape.type,
        x=(shape.x / 100) * canvas_width,
        y=(shape.y / 100) * canvas_height,
        props=_scale_props(shape.props, canvas_width / 100, canvas_height / 100),
        rotation=shape.rotation,
        is_locked=shape.is_locked,
        opacity=shape.opacity,
    )


def serialize_shapes(shapes: Sequence[ShapeRecord], image_width: float, image_height: float) -> ShapeData:
    """
    Serialize shapes drawn on an image to percentage space.

    Raises:
        ValueError: If either image dimension is not positive
    """
    _check_dimensions(image_width, image_height, "Image")
    return ShapeData(
        shapes=[shape_to_percentage(s, image_width, image_height) for s in shapes],
        image_width=image_width,
        image_height=image_height,
    )


def deserialize_shapes(data: ShapeData, canvas_width: float, canvas_height: float) -> List[ShapeRecord]:
    """
    Restore shapes onto a canvas of the given size.

    Raises:
        ValueError: If either canvas dimension is not positive
    """
    _check_dimensions(canvas_width, canvas_height)
    return [shape_to_absolute(s, canvas_width, canvas_height) for s in data.shapes]


def serialize_shapes_for_image(shapes: Sequence[ShapeRecord], image: Image.Image) -> ShapeData:
    """Serialize shapes using the pixel size of the image they were drawn on"""
    width, height = image.size
    return serialize_shapes(shapes, width, height)


def shapes_to_json(shapes: Sequence[ShapeRecord], image_width: float, image_height: float) -> str:
    """Serialize shapes to a JSON shape sidecar"""
    return json.dumps(serialize_shapes(shapes, image_width, image_height).to_dict())


def json_to_shapes(text: Any, canvas_width: float, canvas_height: float) -> Optional[List[ShapeRecord]]:
    """
    Parse a JSON shape sidecar onto a canvas.

    Returns:
        Shapes in canvas pixels, or None if the text cannot be parsed, fails
        validation, or the canvas size is not positive
    """
    if not isinstance(text, (str, bytes, bytearray)):
        logger.warning(f"Invalid shape data: expected JSON text, got {type(text).__name__}")
        return None

    try:
        data = json.loads(text)
    except ValueError as e:
        logger.warning(f"Failed to parse shape data: {e}")
        return None

    if not is_valid_shape_data(data):
        logger.warning("Invalid shape data")
        return None

    try:
        return deserialize_shapes(ShapeData.from_dict(data), canvas_width, canvas_height)
    except ValueError as e:
        logger.warning(f"Cannot restore shapes: {e}")
        return None


def shapes_to_annotation_content(shapes: Sequence[ShapeRecord], image_width: float, image_height: float) -> str:
    """Shape sidecar stored in an image annotation's content field"""
    return shapes_to_json(shapes, image_width, image_height)


def annotation_content_to_shapes(
    content: Optional[str],
    canvas_width: float,
    canvas_height: float,
) -> List[ShapeRecord]:
    """Shapes from an image annotation's content; empty when absent or invalid"""
    if not content:
        return []
    return json_to_shapes(content, canvas_width, canvas_height) or []


def calculate_shapes_bounding_box(shapes: Sequence[ShapeRecord]) -> Optional[Rect]:
    """
    Smallest percentage rect covering every shape.

    Shapes without numeric ``w``/``h`` count as DEFAULT_SHAPE_SIZE wide/tall.

    Returns:
        Rect, or None for no shapes
    """
    if not shapes:
        return None

    min_x = min_y = float("inf")
    max_x = max_y = float("-inf")
    for shape in shapes:
        w = shape.props.get("w")
        h = shape.props.get("h")
        w = w if is_number(w) else DEFAULT_SHAPE_SIZE
        h = h if is_number(h) else DEFAULT_SHAPE_SIZE

        min_x = min(min_x, shape.x)
        min_y = min(min_y, shape.y)
        max_x = max(max_x, shape.x + w)
        max_y = max(max_y, shape.y + h)

    return Rect(x=min_x, y=min_y, width=max_x - min_x, height=max_y - min_y)
