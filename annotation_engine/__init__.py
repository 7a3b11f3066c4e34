"""
Annotation Engine

Coordinate transforms, data models, versioned persistence, legacy migration
and PDF burn-in for document annotations.

Usage:
    from annotation_engine import (
        AnnotationStorage, AnnotationStyle, BoundingBox, PdfTarget,
        create_annotation, derive_file_id, detect_file_type,
    )

    # Open (or start) the sidecar for a document
    storage = AnnotationStorage()
    file_id = derive_file_id("papers/research.pdf")
    annotations = storage.load_or_create(file_id, detect_file_type("papers/research.pdf"))

    # Highlight a selection (normalized page coordinates)
    item = create_annotation(
        target=PdfTarget(page=1, rects=[BoundingBox(0.1, 0.2, 0.4, 0.25)]),
        style=AnnotationStyle(color="yellow", type="highlight"),
        author="alice",
        content="Quantum entanglement is fascinating",
    )
    annotations = storage.save(annotations.with_annotation(item))

    # Burn into the PDF for sharing
    from annotation_engine import export_flattened_pdf
    result = export_flattened_pdf(pdf_bytes, annotations.annotations)
    result.pdf_bytes, result.warnings

    # Plain-text context for a language model
    from annotation_engine import export_annotations_for_ai
    text = export_annotations_for_ai(annotations.annotations)
"""
from .coordinates import (
    Point,
    Rect,
    BoundingBox,
    absolute_to_percentage,
    percentage_to_absolute,
    absolute_rect_to_percentage,
    percentage_rect_to_absolute,
    normalized_to_points,
    points_to_normalized,
    normalize_rect,
    denormalize_rect,
)
from .models import (
    TargetType,
    StyleType,
    FileType,
    PdfTarget,
    ImageTarget,
    CodeLineTarget,
    TextAnchorTarget,
    AnnotationStyle,
    AnnotationItem,
    AnnotationFile,
    create_annotation,
    create_annotation_file,
    create_pin_annotation,
)
from .validation import (
    ValidationResult,
    validate_annotation_item,
    validate_annotation_file,
    is_valid_annotation_item,
    is_valid_annotation_file,
)
from .serialization import (
    serialize_annotation_file,
    deserialize_annotation_file,
    deserialize_annotation_file_with_validation,
    derive_file_id,
    detect_file_type,
)
from .migration import (
    migrate_legacy_annotation,
    migrate_legacy_annotation_file,
    try_migrate_legacy_json,
    load_annotation_with_migration,
)
from .shapes import ShapeRecord, ShapeData, serialize_shapes, deserialize_shapes, shapes_to_json, json_to_shapes
from .colors import get_color_rgb
from .burn_in import BurnInResult, export_flattened_pdf
from .ai_bridge import format_annotation_for_ai, export_annotations_for_ai
from .exporter import AnnotationExporter, ExportOptions
from .storage import AnnotationStorage
from .logging_utils import setup_logging

__all__ = [
    "Point",
    "Rect",
    "BoundingBox",
    "absolute_to_percentage",
    "percentage_to_absolute",
    "absolute_rect_to_percentage",
    "percentage_rect_to_absolute",
    "normalized_to_points",
    "points_to_normalized",
    "normalize_rect",
    "denormalize_rect",
    "TargetType",
    "StyleType",
    "FileType",
    "PdfTarget",
    "ImageTarget",
    "CodeLineTarget",
    "TextAnchorTarget",
    "AnnotationStyle",
    "AnnotationItem",
    "AnnotationFile",
    "create_annotation",
    "create_annotation_file",
    "create_pin_annotation",
    "ValidationResult",
    "validate_annotation_item",
    "validate_annotation_file",
    "is_valid_annotation_item",
    "is_valid_annotation_file",
    "serialize_annotation_file",
    "deserialize_annotation_file",
    "deserialize_annotation_file_with_validation",
    "derive_file_id",
    "detect_file_type",
    "migrate_legacy_annotation",
    "migrate_legacy_annotation_file",
    "try_migrate_legacy_json",
    "load_annotation_with_migration",
    "ShapeRecord",
    "ShapeData",
    "serialize_shapes",
    "deserialize_shapes",
    "shapes_to_json",
    "json_to_shapes",
    "get_color_rgb",
    "BurnInResult",
    "export_flattened_pdf",
    "format_annotation_for_ai",
    "export_annotations_for_ai",
    "AnnotationExporter",
    "ExportOptions",
    "AnnotationStorage",
    "setup_logging",
]
