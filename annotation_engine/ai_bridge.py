"""
AI export bridge

Formats annotations as plain text for language-model context, one line per
annotation:

    Page 1: [Highlight] 'Quantum entanglement is fascinating' - Note: 'Check this citation'
    Line 42: [Underline] 'function processData()'
    Image region: [Area] 'Figure 3 diagram'
"""
from typing import Any, Callable, Dict, Iterable, List, Optional

from .models import AnnotationItem, AnnotationTarget, CodeLineTarget, ImageTarget, PdfTarget, TextAnchorTarget

AnnotationPredicate = Callable[[AnnotationItem], bool]


def format_location(target: AnnotationTarget) -> str:
    """Location label for a target, e.g. "Page 1" or "Line 42" """
    if isinstance(target, PdfTarget):
        return f"Page {target.page}"
    if isinstance(target, CodeLineTarget):
        return f"Line {target.line}"
    if isinstance(target, ImageTarget):
        return "Image region"
    if isinstance(target, TextAnchorTarget):
        return f"Element {target.element_id}"
    raise TypeError(f"Unsupported annotation target: {type(target).__name__}")


def format_style_type(style_type: str) -> str:
    return f"[{style_type[:1].upper()}{style_type[1:]}]"


def format_annotation_for_ai(annotation: AnnotationItem) -> str:
    """Format: "<Location>: [<Style>] '<content>' - Note: '<comment>'" """
    parts = [f"{format_location(annotation.target)}:", format_style_type(annotation.style.type)]
    if annotation.content:
        parts.append(f"'{annotation.content}'")

    line = " ".join(parts)
    if annotation.comment:
        line += f" - Note: '{annotation.comment}'"
    return line


def export_annotations_for_ai(annotations: Optional[Iterable[AnnotationItem]]) -> str:
    """All annotations, one per line in their given order; "" when there are none"""
    if not annotations:
        return ""
    return "\n".join(format_annotation_for_ai(a) for a in annotations)


# --- Predicates ---

def on_page(page: int) -> AnnotationPredicate:
    """Matches PDF annotations on the given 1-indexed page"""
    return lambda a: isinstance(a.target, PdfTarget) and a.target.page == page


def in_line_range(start_line: int, end_line: int) -> AnnotationPredicate:
    """Matches code line annotations within the inclusive range"""
    return lambda a: isinstance(a.target, CodeLineTarget) and start_line <= a.target.line <= end_line


def has_comment(annotation: AnnotationItem) -> bool:
    return bool(annotation.comment)


def filter_annotations(annotations: Iterable[AnnotationItem], predicate: AnnotationPredicate) -> List[AnnotationItem]:
    return [a for a in annotations if predicate(a)]


# --- Filtered exports ---

def export_annotations_for_page(annotations: Iterable[AnnotationItem], page: int) -> str:
    return export_annotations_for_ai(filter_annotations(annotations, on_page(page)))


def export_annotations_for_line_range(annotations: Iterable[AnnotationItem], start_line: int, end_line: int) -> str:
    return export_annotations_for_ai(filter_annotations(annotations, in_line_range(start_line, end_line)))


def export_annotations_with_comments(annotations: Iterable[AnnotationItem]) -> str:
    return export_annotations_for_ai(filter_annotations(annotations, has_comment))


# --- Grouped exports ---

def _group_by_target_type(annotations: Iterable[AnnotationItem]) -> Dict[str, List[AnnotationItem]]:
    groups: Dict[str, List[AnnotationItem]] = {}
    for annotation in annotations:
        groups.setdefault(annotation.target.type, []).append(annotation)
    return groups


def export_annotations_grouped_by_type(annotations: Iterable[AnnotationItem]) -> Dict[str, str]:
    """Formatted text per target type, types in first-seen order"""
    return {
        target_type: export_annotations_for_ai(items)
        for target_type, items in _group_by_target_type(annotations).items()
    }


def export_annotations_structured(annotations: List[AnnotationItem], file_id: str) -> Dict[str, Any]:
    """
    Export with metadata for structured consumption.

    Returns:
        {"fileId", "totalCount", "summary", "byType": {type: {"count", "formatted"}}}
    """
    return {
        "fileId": file_id,
        "totalCount": len(annotations),
        "summary": export_annotations_for_ai(annotations),
        "byType": {
            target_type: {"count": len(items), "formatted": export_annotations_for_ai(items)}
            for target_type, items in _group_by_target_type(annotations).items()
        },
    }
