"""
Annotation Data Models

Immutable dataclasses for the polymorphic (version 2) annotation schema.

An annotation attaches to exactly one target:
    PdfTarget         page + normalized rectangles
    ImageTarget       percentage region of a raster image
    CodeLineTarget    1-indexed source line
    TextAnchorTarget  element id + character offset

JSON keys follow the sidecar file format (camelCase); attributes are snake_case.
"""
import time
import uuid
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union

from .colors import PIN_COLOR
from .config import ANNOTATION_FILE_VERSION
from .coordinates import BoundingBox


class TargetType(str, Enum):
    """Annotation target variants"""
    PDF = "pdf"
    IMAGE = "image"
    CODE_LINE = "code_line"
    TEXT_ANCHOR = "text_anchor"


class StyleType(str, Enum):
    """Known annotation style types"""
    HIGHLIGHT = "highlight"
    UNDERLINE = "underline"
    AREA = "area"
    INK = "ink"
    TEXT = "text"


class FileType(str, Enum):
    """Kinds of annotated documents"""
    PDF = "pdf"
    IMAGE = "image"
    PPTX = "pptx"
    CODE = "code"
    HTML = "html"
    UNKNOWN = "unknown"


def _plain(value: Any) -> Any:
    """Unwrap enum members so stored values are plain strings"""
    return value.value if isinstance(value, Enum) else value


def _optional_text(value: Optional[str]) -> Optional[str]:
    # Empty strings and absent values are the same state
    return value if value else None


def now_ms() -> int:
    """Current Unix timestamp in milliseconds"""
    return int(time.time() * 1000)


def generate_annotation_id() -> str:
    """Generate a unique annotation ID (UUID v4)"""
    return str(uuid.uuid4())


# --- Targets ---

@dataclass(frozen=True)
class PdfTarget:
    """Anchors to a 1-indexed page and one or more normalized rectangles"""
    type: ClassVar[str] = TargetType.PDF.value
    page: int
    rects: Tuple[BoundingBox, ...] = ()

    def __post_init__(self):
        object.__setattr__(self, "rects", tuple(self.rects))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "page": self.page,
            "rects": [r.to_dict() for r in self.rects],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "PdfTarget":
        return cls(page=data["page"], rects=[BoundingBox.from_dict(r) for r in data["rects"]])


@dataclass(frozen=True)
class ImageTarget:
    """Anchors to a region of a raster image, in percentage (0-100) coordinates"""
    type: ClassVar[str] = TargetType.IMAGE.value
    x: float
    y: float
    width: float
    height: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": self.type,
            "x": self.x,
            "y": self.y,
            "width": self.width,
            "height": self.height,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ImageTarget":
        return cls(x=data["x"], y=data["y"], width=data["width"], height=data["height"])


@dataclass(frozen=True)
class CodeLineTarget:
    """Anchors to a 1-indexed source line"""
    type: ClassVar[str] = TargetType.CODE_LINE.value
    line: int

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "line": self.line}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CodeLineTarget":
        return cls(line=data["line"])


@dataclass(frozen=True)
class TextAnchorTarget:
    """Anchors to a character offset inside a rich-text element (slides, HTML)"""
    type: ClassVar[str] = TargetType.TEXT_ANCHOR.value
    element_id: str
    offset: int

    def to_dict(self) -> Dict[str, Any]:
        return {"type": self.type, "elementId": self.element_id, "offset": self.offset}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "TextAnchorTarget":
        return cls(element_id=data["elementId"], offset=data["offset"])


AnnotationTarget = Union[PdfTarget, ImageTarget, CodeLineTarget, TextAnchorTarget]

_TARGET_CLASSES = {
    TargetType.PDF.value: PdfTarget,
    TargetType.IMAGE.value: ImageTarget,
    TargetType.CODE_LINE.value: CodeLineTarget,
    TargetType.TEXT_ANCHOR.value: TextAnchorTarget,
}


def target_from_dict(data: Dict[str, Any]) -> AnnotationTarget:
    """
    Build a target from its JSON form, dispatching on the ``type`` tag

    Raises:
        ValueError: If the type tag is unknown
    """
    target_cls = _TARGET_CLASSES.get(data.get("type"))
    if target_cls is None:
        raise ValueError(f"Unknown annotation target type: {data.get('type')!r}")
    return target_cls.from_dict(data)


# --- Style ---

@dataclass(frozen=True)
class AnnotationStyle:
    """Colour (hex or palette name) and style type of an annotation"""
    color: str
    type: str = StyleType.HIGHLIGHT.value

    def __post_init__(self):
        object.__setattr__(self, "type", _plain(self.type))

    def to_dict(self) -> Dict[str, str]:
        return {"color": self.color, "type": self.type}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnnotationStyle":
        return cls(color=data["color"], type=data["type"])


# --- Items and files ---

@dataclass(frozen=True)
class AnnotationItem:
    """
    A single annotation

    Attributes:
        id: UUID v4, unique within a file
        target: Where the annotation is anchored
        style: Colour and style type
        author: Author identifier
        created_at: Unix timestamp in milliseconds
        content: Text captured from the document (None when absent)
        comment: The user's note (None when absent)
    """
    id: str
    target: AnnotationTarget
    style: AnnotationStyle
    author: str
    created_at: int
    content: Optional[str] = None
    comment: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, "content", _optional_text(self.content))
        object.__setattr__(self, "comment", _optional_text(self.comment))

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "id": self.id,
            "target": self.target.to_dict(),
            "style": self.style.to_dict(),
        }
        if self.content is not None:
            data["content"] = self.content
        if self.comment is not None:
            data["comment"] = self.comment
        data["author"] = self.author
        data["createdAt"] = self.created_at
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnnotationItem":
        return cls(
            id=data["id"],
            target=target_from_dict(data["target"]),
            style=AnnotationStyle.from_dict(data["style"]),
            author=data["author"],
            created_at=data["createdAt"],
            content=data.get("content"),
            comment=data.get("comment"),
        )


# Fields that may be swapped on an existing annotation
UPDATABLE_FIELDS = frozenset({"target", "style", "content", "comment"})


@dataclass(frozen=True)
class AnnotationFile:
    """
    All annotations for one document; the unit of persistence

    Files are never edited in place: every ``with_*`` method returns a new file.
    """
    VERSION: ClassVar[int] = ANNOTATION_FILE_VERSION
    file_id: str
    file_type: str = FileType.UNKNOWN.value
    annotations: Tuple[AnnotationItem, ...] = ()
    last_modified: int = field(default_factory=now_ms)

    def __post_init__(self):
        object.__setattr__(self, "file_type", _plain(self.file_type))
        object.__setattr__(self, "annotations", tuple(self.annotations))

    @property
    def version(self) -> int:
        return self.VERSION

    def to_dict(self) -> Dict[str, Any]:
        return {
            "version": self.VERSION,
            "fileId": self.file_id,
            "fileType": self.file_type,
            "annotations": [a.to_dict() for a in self.annotations],
            "lastModified": self.last_modified,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AnnotationFile":
        if type(data.get("version")) is not int or data["version"] != cls.VERSION:
            raise ValueError(f"Unsupported annotation file version: {data.get('version')!r}")
        return cls(
            file_id=data["fileId"],
            file_type=data["fileType"],
            annotations=[AnnotationItem.from_dict(a) for a in data["annotations"]],
            last_modified=data["lastModified"],
        )

    def get_annotation(self, annotation_id: str) -> Optional[AnnotationItem]:
        """Get an annotation by ID"""
        for annotation in self.annotations:
            if annotation.id == annotation_id:
                return annotation
        return None

    def with_annotation(self, annotation: AnnotationItem) -> "AnnotationFile":
        """
        Return a copy with the annotation appended

        Raises:
            ValueError: If an annotation with the same ID already exists
        """
        if self.get_annotation(annotation.id) is not None:
            raise ValueError(f"Annotation {annotation.id} already exists in {self.file_id}")
        return replace(self, annotations=self.annotations + (annotation,))

    def with_replaced_annotation(self, annotation: AnnotationItem) -> "AnnotationFile":
        """
        Return a copy with the annotation of the same ID fully replaced

        Raises:
            KeyError: If no annotation has that ID
        """
        if self.get_annotation(annotation.id) is None:
            raise KeyError(annotation.id)
        return replace(
            self,
            annotations=tuple(annotation if a.id == annotation.id else a for a in self.annotations),
        )

    def with_updated_annotation(self, annotation_id: str, **changes: Any) -> "AnnotationFile":
        """
        Return a copy with whole fields of one annotation swapped out.

        Only target, style, content and comment may change; identity fields
        (id, author, created_at) change only through full replacement.

        Raises:
            KeyError: If no annotation has that ID
            ValueError: If a field other than the updatable ones is given
        """
        forbidden = set(changes) - UPDATABLE_FIELDS
        if forbidden:
            raise ValueError(f"Cannot update annotation fields: {', '.join(sorted(forbidden))}")

        current = self.get_annotation(annotation_id)
        if current is None:
            raise KeyError(annotation_id)
        return self.with_replaced_annotation(replace(current, **changes))

    def without_annotation(self, annotation_id: str) -> "AnnotationFile":
        """Return a copy with the annotation removed (unchanged copy if not found)"""
        return replace(
            self,
            annotations=tuple(a for a in self.annotations if a.id != annotation_id),
        )

    def touch(self, timestamp: Optional[int] = None) -> "AnnotationFile":
        """Return a copy with an updated lastModified timestamp"""
        return replace(self, last_modified=now_ms() if timestamp is None else timestamp)

    def count_by_target_type(self) -> Dict[str, int]:
        """Number of annotations per target type"""
        counts: Dict[str, int] = {}
        for annotation in self.annotations:
            counts[annotation.target.type] = counts.get(annotation.target.type, 0) + 1
        return counts

    @property
    def commented_annotations(self) -> int:
        """Number of annotations carrying a comment"""
        return sum(1 for a in self.annotations if a.comment)


# --- Constructors ---

def create_annotation(
    target: AnnotationTarget,
    style: AnnotationStyle,
    author: str,
    content: Optional[str] = None,
    comment: Optional[str] = None,
    annotation_id: Optional[str] = None,
    created_at: Optional[int] = None,
) -> AnnotationItem:
    """
    Create a new annotation

    Args:
        target: Where the annotation is anchored (coordinates already normalized)
        style: Colour and style type
        author: Author identifier from the session layer
        content: Captured document text, if any
        comment: User's note, if any
        annotation_id: Explicit ID (default: new UUID v4)
        created_at: Explicit timestamp in ms (default: now)

    Returns:
        New AnnotationItem
    """
    return AnnotationItem(
        id=annotation_id or generate_annotation_id(),
        target=target,
        style=style,
        author=author,
        created_at=now_ms() if created_at is None else created_at,
        content=content,
        comment=comment,
    )


def create_annotation_file(
    file_id: str,
    file_type: Union[FileType, str] = FileType.UNKNOWN,
    annotations: Optional[List[AnnotationItem]] = None,
    last_modified: Optional[int] = None,
) -> AnnotationFile:
    """Create an annotation file, empty unless annotations are given"""
    return AnnotationFile(
        file_id=file_id,
        file_type=file_type,
        annotations=tuple(annotations or ()),
        last_modified=now_ms() if last_modified is None else last_modified,
    )


def create_pin_annotation(
    page: int,
    x: float,
    y: float,
    author: str,
    comment: Optional[str] = None,
    color: str = PIN_COLOR,
    pin_size: float = 0.02,
) -> AnnotationItem:
    """
    Create a pin: a small area annotation centred on a normalized page point.

    The pin's square is kept inside the page.
    """
    half = pin_size / 2
    box = BoundingBox(
        x1=max(0.0, x - half),
        y1=max(0.0, y - half),
        x2=min(1.0, x + half),
        y2=min(1.0, y + half),
    )
    return create_annotation(
        target=PdfTarget(page=page, rects=[box]),
        style=AnnotationStyle(color=color, type=StyleType.AREA),
        author=author,
        comment=comment,
    )


def is_pin_annotation(annotation: AnnotationItem) -> bool:
    """Pins are single-rect area annotations smaller than 5% of the page"""
    target = annotation.target
    if not isinstance(target, PdfTarget) or annotation.style.type != StyleType.AREA.value:
        return False
    if len(target.rects) != 1:
        return False
    rect = target.rects[0]
    return rect.width < 0.05 and rect.height < 0.05
