"""
Burn-in export

Draws PDF-targeted annotations permanently into a copy of a PDF's bytes:
translucent filled rectangles for every highlight rect and a small marker
for annotations that carry a comment. Comment text itself is never written.
"""
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence

import fitz  # PyMuPDF

from .colors import get_color_rgb
from .config import HIGHLIGHT_OPACITY, NOTE_MARKER_FONT_SIZE, NOTE_MARKER_SIZE
from .coordinates import normalized_to_points
from .models import AnnotationItem, PdfTarget

logger = logging.getLogger(__name__)

NOTE_MARKER_FILL = (1.0, 0.76, 0.03)
NOTE_MARKER_BORDER = (0.8, 0.6, 0.0)
NOTE_MARKER_TEXT = (0.0, 0.0, 0.0)


@dataclass
class BurnInResult:
    """
    Flattened PDF plus diagnostics

    Attributes:
        pdf_bytes: The annotated document
        warnings: Annotations or pages that were skipped, with the reason
        rects_drawn: Number of highlight rectangles drawn
        notes_drawn: Number of comment markers drawn
        pages_touched: Number of pages that received at least one annotation
    """
    pdf_bytes: bytes
    warnings: List[str] = field(default_factory=list)
    rects_drawn: int = 0
    notes_drawn: int = 0
    pages_touched: int = 0


def group_by_page(annotations: Sequence[AnnotationItem]) -> Dict[int, List[AnnotationItem]]:
    """PDF-targeted annotations grouped by 1-indexed page, pages in first-seen order"""
    by_page: Dict[int, List[AnnotationItem]] = {}
    for annotation in annotations:
        if isinstance(annotation.target, PdfTarget):
            by_page.setdefault(annotation.target.page, []).append(annotation)
    return by_page


def _draw_note_marker(page: fitz.Page, x: float, y: float) -> None:
    half = NOTE_MARKER_SIZE / 2
    marker = fitz.Rect(x - half, y - half, x + half, y + half)
    page.draw_rect(marker, color=NOTE_MARKER_BORDER, fill=NOTE_MARKER_FILL, width=1)
    page.insert_text(
        fitz.Point(x - NOTE_MARKER_FONT_SIZE * 0.3, y + NOTE_MARKER_FONT_SIZE * 0.35),
        "N",
        fontsize=NOTE_MARKER_FONT_SIZE,
        color=NOTE_MARKER_TEXT,
    )


def _burn_annotation(page: fitz.Page, annotation: AnnotationItem, opacity: float, result: BurnInResult) -> None:
    width, height = page.rect.width, page.rect.height
    rgb = get_color_rgb(annotation.style.color)

    rects = []
    for box in annotation.target.rects:
        # Page points have a bottom-left origin; PyMuPDF draws from the top-left
        points = normalized_to_points(box, width, height)
        rects.append(fitz.Rect(
            points.x,
            height - points.y - points.height,
            points.x + points.width,
            height - points.y,
        ))

    for rect in rects:
        page.draw_rect(rect, color=None, fill=rgb, fill_opacity=opacity, width=0)
    result.rects_drawn += len(rects)

    if annotation.comment and rects:
        _draw_note_marker(page, rects[0].x0, rects[0].y0)
        result.notes_drawn += 1


def export_flattened_pdf(
    pdf_bytes: bytes,
    annotations: Sequence[AnnotationItem],
    opacity: float = HIGHLIGHT_OPACITY,
) -> BurnInResult:
    """
    Burn annotations into a copy of a PDF.

    Non-PDF targets are ignored. Annotations on pages the document does not
    have are skipped with a warning, as is any annotation that fails to draw;
    the rest of the export still completes.

    Args:
        pdf_bytes: Source PDF (never modified)
        annotations: Annotations to draw
        opacity: Fill opacity of highlight rectangles

    Returns:
        BurnInResult with the new PDF bytes and diagnostics

    Raises:
        ValueError: If the bytes cannot be opened as a PDF
    """
    source = bytes(pdf_bytes)
    try:
        doc = fitz.open(stream=source, filetype="pdf")
    except Exception as e:
        raise ValueError(f"Cannot open PDF: {e}") from e

    with doc:
        if not doc.is_pdf:
            raise ValueError("Input is not a PDF document")

        result = BurnInResult(pdf_bytes=b"")
        for page_number, page_annotations in group_by_page(annotations).items():
            if not 1 <= page_number <= doc.page_count:
                message = (
                    f"Page {page_number} out of range (document has {doc.page_count} pages); "
                    f"skipped {len(page_annotations)} annotation(s)"
                )
                logger.debug(message)
                result.warnings.append(message)
                continue

            page = doc[page_number - 1]
            drawn = False
            for annotation in page_annotations:
                try:
                    _burn_annotation(page, annotation, opacity, result)
                    drawn = True
                except Exception as e:
                    message = f"Failed to draw annotation {annotation.id} on page {page_number}: {e}"
                    logger.debug(message)
                    result.warnings.append(message)
            if drawn:
                result.pages_touched += 1

        # Source document ID is kept: identical inputs give identical bytes
        result.pdf_bytes = doc.tobytes(garbage=4, deflate=True, no_new_id=True)

    logger.debug(
        f"Burned {result.rects_drawn} rects and {result.notes_drawn} notes into "
        f"{result.pages_touched} pages"
    )
    return result


def count_highlight_rects(annotations: Sequence[AnnotationItem]) -> int:
    """Number of rectangles a burn-in would draw"""
    return sum(len(a.target.rects) for a in annotations if isinstance(a.target, PdfTarget))


def count_annotations_with_comments(annotations: Sequence[AnnotationItem]) -> int:
    """Number of PDF annotations that would get a comment marker"""
    return sum(
        1 for a in annotations
        if isinstance(a.target, PdfTarget) and a.comment and a.target.rects
    )
