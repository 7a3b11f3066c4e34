"""
Migration from the legacy (version 1) format to the current (version 2) format

Migration is a pure function of the legacy record. Files that are already
current are never re-migrated.
"""
import json
import logging
from dataclasses import dataclass, field
from typing import Any, List, Optional

from .config import LEGACY_AUTHOR
from .coordinates import BoundingBox
from .legacy import LegacyAnnotation, LegacyAnnotationFile, is_legacy_annotation_file
from .models import (
    AnnotationFile,
    AnnotationItem,
    AnnotationStyle,
    FileType,
    PdfTarget,
    StyleType,
)
from .serialization import deserialize_annotation_file_with_validation
from .validation import validate_annotation_file

logger = logging.getLogger(__name__)

# Legacy annotation type -> current style type; unknown types pass through
LEGACY_TYPE_MAP = {
    "text": StyleType.HIGHLIGHT.value,
    "area": StyleType.AREA.value,
    "textNote": StyleType.TEXT.value,
}


@dataclass
class LoadResult:
    """Outcome of loading annotation JSON of either version"""
    file: Optional[AnnotationFile]
    was_migrated: bool = False
    errors: List[str] = field(default_factory=list)


def map_legacy_type(legacy_type: str) -> str:
    return LEGACY_TYPE_MAP.get(legacy_type, legacy_type)


def migrate_legacy_annotation(legacy: LegacyAnnotation) -> AnnotationItem:
    """
    Convert a legacy annotation to a PDF-targeted annotation.

    Only the four corners of each rect are kept; the legacy width/height
    fields are derivable and dropped. Empty content text and comments are
    left out.
    """
    rects = [BoundingBox(x1=r.x1, y1=r.y1, x2=r.x2, y2=r.y2) for r in legacy.position.rects]
    return AnnotationItem(
        id=legacy.id,
        target=PdfTarget(page=legacy.page, rects=rects),
        style=AnnotationStyle(color=legacy.color, type=map_legacy_type(legacy.type)),
        author=LEGACY_AUTHOR,
        created_at=legacy.timestamp,
        content=legacy.content.text or None,
        comment=legacy.comment or None,
    )


def migrate_legacy_annotation_file(legacy_file: LegacyAnnotationFile) -> AnnotationFile:
    """Migrate every annotation, keeping order, fileId and lastModified"""
    return AnnotationFile(
        file_id=legacy_file.file_id,
        file_type=FileType.PDF,
        annotations=[migrate_legacy_annotation(a) for a in legacy_file.annotations],
        last_modified=legacy_file.last_modified,
    )


def _parse_json(text: Any) -> Any:
    if not isinstance(text, (str, bytes, bytearray)):
        raise ValueError(f"Expected JSON text, got {type(text).__name__}")
    return json.loads(text)


def is_legacy_annotation_json(text: Any) -> bool:
    """Check whether raw JSON holds a version 1 annotation file"""
    try:
        return is_legacy_annotation_file(_parse_json(text))
    except ValueError:
        return False


def try_migrate_legacy_json(text: Any) -> Optional[AnnotationFile]:
    """
    Parse, check and migrate legacy JSON.

    Returns:
        Migrated file, or None if the text is not a well-formed legacy file
        (current version 2 files included)
    """
    try:
        data = _parse_json(text)
    except ValueError:
        return None
    if not is_legacy_annotation_file(data):
        return None

    try:
        return migrate_legacy_annotation_file(LegacyAnnotationFile.from_dict(data))
    except (KeyError, TypeError, ValueError) as e:
        logger.warning(f"Malformed legacy annotation file: {e}")
        return None


def load_annotation_with_migration(text: Any) -> LoadResult:
    """
    Load annotation JSON of either version, migrating legacy files.

    Args:
        text: Raw JSON from a sidecar file

    Returns:
        LoadResult with the current-format file, whether it was migrated,
        and any errors
    """
    try:
        data = _parse_json(text)
    except ValueError as e:
        return LoadResult(None, errors=[f"JSON parse error: {e}"])

    if is_legacy_annotation_file(data):
        try:
            legacy_file = LegacyAnnotationFile.from_dict(data)
        except (KeyError, TypeError, ValueError) as e:
            return LoadResult(None, errors=[f"Malformed legacy annotation file: {e}"])
        migrated = migrate_legacy_annotation_file(legacy_file)
        # Refuse a migration that would not load back as version 2
        validation = validate_annotation_file(migrated)
        if not validation.valid:
            return LoadResult(None, errors=[f"Migrated file is invalid: {e}" for e in validation.errors])
        return LoadResult(migrated, was_migrated=True)

    if isinstance(data, dict) and "version" in data:
        result = deserialize_annotation_file_with_validation(text)
        return LoadResult(result.file, errors=result.errors)

    return LoadResult(None, errors=["Unknown annotation file format"])
