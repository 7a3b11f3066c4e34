"""
Structural validators for annotation data

Validators check structure, types and ranges only. They accept either raw
JSON-decoded data or model instances, never raise, and report every problem
found rather than stopping at the first one.
"""
import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping

from .config import ANNOTATION_FILE_VERSION, NORMALIZED_TOLERANCE, SHAPE_DATA_VERSION
from .models import FileType, TargetType

FILE_TYPES = tuple(t.value for t in FileType)
TARGET_TYPES = tuple(t.value for t in TargetType)


@dataclass
class ValidationResult:
    """Outcome of a validation: valid when no errors were collected"""
    valid: bool
    errors: List[str] = field(default_factory=list)

    @classmethod
    def from_errors(cls, errors: List[str]) -> "ValidationResult":
        return cls(valid=not errors, errors=errors)


def _as_data(value: Any) -> Any:
    # Model instances are validated through their JSON form
    to_dict = getattr(value, "to_dict", None)
    return to_dict() if callable(to_dict) else value


def is_number(value: Any) -> bool:
    """Finite int or float; booleans are not numbers"""
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def is_integer(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool)


def _in_percentage_range(value: Any) -> bool:
    return is_number(value) and 0 <= value <= 100


def _in_normalized_range(value: Any) -> bool:
    return is_number(value) and -NORMALIZED_TOLERANCE <= value <= 1 + NORMALIZED_TOLERANCE


def validate_bounding_box(value: Any) -> ValidationResult:
    """Normalized (0-1) box; a small tolerance absorbs float conversion noise"""
    value = _as_data(value)
    if not isinstance(value, Mapping):
        return ValidationResult.from_errors(["Bounding box must be an object"])

    errors = []
    for key in ("x1", "y1", "x2", "y2"):
        if not _in_normalized_range(value.get(key)):
            errors.append(f"Bounding box {key} must be a number in range 0-1")
    return ValidationResult.from_errors(errors)


def validate_annotation_target(value: Any) -> ValidationResult:
    """Validate any of the four target variants"""
    value = _as_data(value)
    if not isinstance(value, Mapping):
        return ValidationResult.from_errors(["Target must be an object"])

    errors = []
    target_type = value.get("type")

    if target_type == TargetType.PDF.value:
        page = value.get("page")
        if not is_integer(page) or page < 1:
            errors.append("PDF target page must be a positive integer")
        rects = value.get("rects")
        if not isinstance(rects, list):
            errors.append("PDF target rects must be an array")
        else:
            for i, rect in enumerate(rects):
                if not validate_bounding_box(rect).valid:
                    errors.append(
                        f"PDF target rects[{i}] is invalid: coordinates must be numbers in range 0-1"
                    )

    elif target_type == TargetType.IMAGE.value:
        for key in ("x", "y", "width", "height"):
            if not _in_percentage_range(value.get(key)):
                errors.append(f"Image target {key} must be a number in range 0-100")

    elif target_type == TargetType.CODE_LINE.value:
        line = value.get("line")
        if not is_integer(line) or line < 1:
            errors.append("Code line target line must be a positive integer")

    elif target_type == TargetType.TEXT_ANCHOR.value:
        if not isinstance(value.get("elementId"), str):
            errors.append("Text anchor target elementId must be a string")
        offset = value.get("offset")
        if not is_integer(offset) or offset < 0:
            errors.append("Text anchor target offset must be a non-negative integer")

    else:
        errors.append(
            f"Invalid target type: {target_type!r}. Must be one of: {', '.join(TARGET_TYPES)}"
        )

    return ValidationResult.from_errors(errors)


def validate_annotation_style(value: Any) -> ValidationResult:
    value = _as_data(value)
    if not isinstance(value, Mapping):
        return ValidationResult.from_errors(["Style must be an object"])

    errors = []
    color = value.get("color")
    if not isinstance(color, str) or not color:
        errors.append("Style color must be a non-empty string")
    # Open set: StyleType lists the known types only
    style_type = value.get("type")
    if not isinstance(style_type, str) or not style_type:
        errors.append("Style type must be a non-empty string")
    return ValidationResult.from_errors(errors)


def validate_annotation_item(value: Any) -> ValidationResult:
    """
    Validate a single annotation.

    Nested target/style errors are reported with a ``target:``/``style:`` prefix.
    """
    value = _as_data(value)
    if not isinstance(value, Mapping):
        return ValidationResult.from_errors(["Annotation must be an object"])

    errors = []
    annotation_id = value.get("id")
    if not isinstance(annotation_id, str) or not annotation_id:
        errors.append("Annotation id must be a non-empty string")
    if not isinstance(value.get("author"), str):
        errors.append("Annotation author must be a string")
    if not is_number(value.get("createdAt")):
        errors.append("Annotation createdAt must be a number (timestamp)")

    if value.get("target") is None:
        errors.append("Annotation target is required")
    else:
        errors.extend(f"target: {e}" for e in validate_annotation_target(value["target"]).errors)

    if value.get("style") is None:
        errors.append("Annotation style is required")
    else:
        errors.extend(f"style: {e}" for e in validate_annotation_style(value["style"]).errors)

    for key in ("content", "comment"):
        if value.get(key) is not None and not isinstance(value[key], str):
            errors.append(f"Annotation {key} must be a string if provided")

    return ValidationResult.from_errors(errors)


def validate_annotation_file(value: Any) -> ValidationResult:
    """Validate a current-format annotation file, including every annotation in it"""
    value = _as_data(value)
    if not isinstance(value, Mapping):
        return ValidationResult.from_errors(["Annotation file must be an object"])

    errors = []
    version = value.get("version")
    if not is_integer(version) or version != ANNOTATION_FILE_VERSION:
        errors.append(f"Annotation file version must be {ANNOTATION_FILE_VERSION}")
    if not isinstance(value.get("fileId"), str):
        errors.append("Annotation file fileId must be a string")
    if value.get("fileType") not in FILE_TYPES:
        errors.append(f"Annotation file fileType must be one of: {', '.join(FILE_TYPES)}")
    if not is_number(value.get("lastModified")):
        errors.append("Annotation file lastModified must be a number (timestamp)")

    annotations = value.get("annotations")
    if not isinstance(annotations, list):
        errors.append("Annotation file annotations must be an array")
    else:
        seen = set()
        for i, annotation in enumerate(annotations):
            errors.extend(f"annotations[{i}]: {e}" for e in validate_annotation_item(annotation).errors)
            annotation_id = annotation.get("id") if isinstance(annotation, Mapping) else None
            if isinstance(annotation_id, str) and annotation_id:
                if annotation_id in seen:
                    errors.append(f"annotations[{i}]: duplicate annotation id {annotation_id}")
                seen.add(annotation_id)

    return ValidationResult.from_errors(errors)


def is_valid_annotation_item(value: Any) -> bool:
    return validate_annotation_item(value).valid


def is_valid_annotation_file(value: Any) -> bool:
    return validate_annotation_file(value).valid


def is_valid_serialized_shape(value: Any) -> bool:
    """
    Check a percentage-space shape record.

    Position must lie in 0-100; numeric ``w``/``h`` props are held to the same range.
    """
    value = _as_data(value)
    if not isinstance(value, Mapping):
        return False
    if not isinstance(value.get("id"), str) or not isinstance(value.get("type"), str):
        return False
    if not _in_percentage_range(value.get("x")) or not _in_percentage_range(value.get("y")):
        return False

    props = value.get("props")
    if not isinstance(props, Mapping):
        return False
    for key in ("w", "h"):
        if is_number(props.get(key)) and not _in_percentage_range(props[key]):
            return False
    return True


def is_valid_shape_data(value: Any) -> bool:
    """Check a shape sidecar container ``{version, shapes, imageWidth, imageHeight}``"""
    value = _as_data(value)
    if not isinstance(value, Mapping):
        return False

    version = value.get("version")
    if not is_integer(version) or version != SHAPE_DATA_VERSION:
        return False
    if not isinstance(value.get("shapes"), list):
        return False
    for key in ("imageWidth", "imageHeight"):
        if not is_number(value.get(key)) or value[key] <= 0:
            return False
    return all(is_valid_serialized_shape(shape) for shape in value["shapes"])
