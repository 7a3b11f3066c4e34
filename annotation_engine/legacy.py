"""
Legacy (version 1) annotation records

The version 1 format was PDF-only: every annotation carried a page and a
position with redundant width/height fields. These records are read-only and
exist only to be migrated; they are kept apart from the current schema.
"""
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Tuple

from .config import LEGACY_FILE_VERSION
from .validation import is_integer, is_number


def _require_number(data: Mapping[str, Any], key: str) -> float:
    value = data[key]
    if not is_number(value):
        raise TypeError(f"Legacy field {key!r} must be a number, got {value!r}")
    return value


def _require_str(data: Mapping[str, Any], key: str) -> str:
    value = data[key]
    if not isinstance(value, str):
        raise TypeError(f"Legacy field {key!r} must be a string, got {value!r}")
    return value


def _optional_str(data: Mapping[str, Any], key: str) -> Optional[str]:
    value = data.get(key)
    if value is not None and not isinstance(value, str):
        raise TypeError(f"Legacy field {key!r} must be a string if provided, got {value!r}")
    return value


def _require_mapping(value: Any, what: str) -> Mapping[str, Any]:
    if not isinstance(value, Mapping):
        raise TypeError(f"Legacy {what} must be an object, got {type(value).__name__}")
    return value


@dataclass(frozen=True)
class LegacyBoundingRect:
    """Normalized corners plus the page size (pixels) at creation time"""
    x1: float
    y1: float
    x2: float
    y2: float
    width: float
    height: float

    @classmethod
    def from_dict(cls, data: Any) -> "LegacyBoundingRect":
        data = _require_mapping(data, "bounding rect")
        return cls(**{key: _require_number(data, key) for key in ("x1", "y1", "x2", "y2", "width", "height")})


@dataclass(frozen=True)
class LegacyPosition:
    bounding_rect: LegacyBoundingRect
    rects: Tuple[LegacyBoundingRect, ...]

    @classmethod
    def from_dict(cls, data: Any) -> "LegacyPosition":
        data = _require_mapping(data, "position")
        rects = data["rects"]
        if not isinstance(rects, list):
            raise TypeError("Legacy position rects must be an array")
        return cls(
            bounding_rect=LegacyBoundingRect.from_dict(data["boundingRect"]),
            rects=tuple(LegacyBoundingRect.from_dict(r) for r in rects),
        )


@dataclass(frozen=True)
class LegacyContent:
    """Captured text (text highlights) or base64 thumbnail (area highlights)"""
    text: Optional[str] = None
    image: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "LegacyContent":
        data = _require_mapping(data, "content")
        return cls(text=_optional_str(data, "text"), image=_optional_str(data, "image"))


@dataclass(frozen=True)
class LegacyAnnotation:
    """
    A version 1 annotation

    Attributes:
        id: UUID v4
        file_id: File path identifier
        page: 1-indexed page number
        position: Overall and per-line rectangles
        content: Captured content
        comment: User's note ("" when none)
        color: Colour name or hex
        timestamp: Unix timestamp (ms)
        type: 'text', 'area' or 'textNote'
    """
    id: str
    file_id: str
    page: int
    position: LegacyPosition
    content: LegacyContent
    comment: str
    color: str
    timestamp: float
    type: str

    @classmethod
    def from_dict(cls, data: Any) -> "LegacyAnnotation":
        data = _require_mapping(data, "annotation")
        page = data["page"]
        if not is_integer(page) or page < 1:
            raise ValueError(f"Legacy annotation page must be a positive integer, got {page!r}")
        return cls(
            id=_require_str(data, "id"),
            file_id=_require_str(data, "fileId"),
            page=page,
            position=LegacyPosition.from_dict(data["position"]),
            content=LegacyContent.from_dict(data["content"]),
            comment=_require_str(data, "comment"),
            color=_require_str(data, "color"),
            timestamp=_require_number(data, "timestamp"),
            type=_require_str(data, "type"),
        )


@dataclass(frozen=True)
class LegacyAnnotationFile:
    VERSION = LEGACY_FILE_VERSION
    file_id: str
    annotations: Tuple[LegacyAnnotation, ...]
    last_modified: float

    @classmethod
    def from_dict(cls, data: Any) -> "LegacyAnnotationFile":
        """
        Build a legacy file from its JSON form

        Raises:
            ValueError: If the data is not a version 1 file
            KeyError, TypeError: If an annotation is malformed
        """
        if not is_legacy_annotation_file(data):
            raise ValueError("Not a legacy (version 1) annotation file")
        return cls(
            file_id=data["fileId"],
            annotations=tuple(LegacyAnnotation.from_dict(a) for a in data["annotations"]),
            last_modified=data["lastModified"],
        )


def is_legacy_annotation_file(data: Any) -> bool:
    """
    Check for the version 1 container signature.

    Only the container is checked; any other shape, including a current
    version 2 file, is not legacy.
    """
    if not isinstance(data, Mapping):
        return False
    version = data.get("version")
    return (
        is_integer(version)
        and version == LEGACY_FILE_VERSION
        and isinstance(data.get("fileId"), str)
        and isinstance(data.get("annotations"), list)
        and is_number(data.get("lastModified"))
    )

