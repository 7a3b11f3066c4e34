"""
Annotation Exporter

Export an annotation file as:
- Markdown or plain text notes, optionally grouped by page, colour or type
- JSON summary for external tools
- Flattened PDF with annotations burned in
- Zip bundle containing the flattened PDF, annotations.json and metadata.json
"""
import io
import json
import logging
import zipfile
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Dict, List, Optional, Tuple

from .ai_bridge import format_location
from .burn_in import BurnInResult, export_flattened_pdf
from .colors import HIGHLIGHT_COLORS
from .config import EXPORTS_DIR
from .models import AnnotationFile, AnnotationItem, PdfTarget
from .serialization import serialize_annotation_file

logger = logging.getLogger(__name__)

OTHER_GROUP = "Other"

_MARKDOWN_SPECIAL = "\\*_[]()>#"


class ExportFormat(str, Enum):
    MARKDOWN = "markdown"
    TEXT = "text"
    JSON = "json"


class GroupBy(str, Enum):
    PAGE = "page"
    COLOR = "color"
    TYPE = "type"
    NONE = "none"


_EXTENSIONS = {ExportFormat.MARKDOWN: "md", ExportFormat.TEXT: "txt", ExportFormat.JSON: "json"}


@dataclass
class ExportOptions:
    """
    Options for text exports

    Attributes:
        format: markdown, text or json
        group_by: page, color, type or none
        include_timestamps: Show each annotation's creation time
        include_locations: Show each annotation's location
        include_colors: Show each annotation's colour name
        file_name: Document name shown in the header
    """
    format: ExportFormat = ExportFormat.MARKDOWN
    group_by: GroupBy = GroupBy.PAGE
    include_timestamps: bool = True
    include_locations: bool = True
    include_colors: bool = True
    file_name: Optional[str] = None

    def __post_init__(self):
        self.format = ExportFormat(self.format)
        self.group_by = GroupBy(self.group_by)


@dataclass
class ExportResult:
    content: str
    format: ExportFormat
    annotation_count: int


def format_timestamp(timestamp_ms: float) -> str:
    return datetime.fromtimestamp(timestamp_ms / 1000).strftime("%Y-%m-%d %H:%M")


def escape_markdown(text: str) -> str:
    return "".join(f"\\{c}" if c in _MARKDOWN_SPECIAL else c for c in text)


def color_name(color: str) -> str:
    """Palette display name for a colour value or hex, else the colour itself"""
    for entry in HIGHLIGHT_COLORS:
        if color in (entry.value, entry.hex):
            return entry.name
    return color


def _page_sort_key(annotation: AnnotationItem) -> Tuple[int, int, float]:
    # PDF annotations first by page, everything else after in creation order
    if isinstance(annotation.target, PdfTarget):
        return (0, annotation.target.page, annotation.created_at)
    return (1, 0, annotation.created_at)


def group_annotations(annotations: List[AnnotationItem], group_by: GroupBy) -> Dict[str, List[AnnotationItem]]:
    """
    Group annotations for display.

    Page groups are ordered by page number with non-PDF annotations last
    under "Other"; colour and type groups are ordered by name. Within a
    group annotations are ordered by creation time.
    """
    group_by = GroupBy(group_by)
    ordered = sorted(annotations, key=_page_sort_key)
    if group_by == GroupBy.NONE:
        return {"All": ordered}

    groups: Dict[str, List[AnnotationItem]] = {}
    for annotation in ordered:
        if group_by == GroupBy.PAGE:
            key = format_location(annotation.target) if isinstance(annotation.target, PdfTarget) else OTHER_GROUP
        elif group_by == GroupBy.COLOR:
            key = color_name(annotation.style.color)
        else:
            key = annotation.style.type.capitalize()
        groups.setdefault(key, []).append(annotation)

    for items in groups.values():
        items.sort(key=lambda a: a.created_at)
    if group_by == GroupBy.PAGE:
        return groups
    return {key: groups[key] for key in sorted(groups)}


def _base_name(annotation_file: AnnotationFile, original_file_name: Optional[str]) -> str:
    if original_file_name:
        stem = Path(original_file_name).stem
        if stem:
            return stem
    return annotation_file.file_id


class AnnotationExporter:
    """
    Export annotation files as notes, flattened PDFs or downloadable bundles
    """

    def __init__(self, output_dir: Path = None):
        """
        Initialize exporter

        Args:
            output_dir: Output directory for exports (default: EXPORTS_DIR)
        """
        if output_dir is None:
            output_dir = EXPORTS_DIR
        self.output_dir = Path(output_dir)

    def _meta_parts(self, annotation: AnnotationItem, options: ExportOptions) -> List[str]:
        parts = []
        if options.include_locations and (
            options.group_by != GroupBy.PAGE or not isinstance(annotation.target, PdfTarget)
        ):
            parts.append(format_location(annotation.target))
        if options.include_colors and options.group_by != GroupBy.COLOR:
            parts.append(color_name(annotation.style.color))
        return parts

    def to_markdown(self, annotation_file: AnnotationFile, options: Optional[ExportOptions] = None) -> str:
        """Markdown notes: content as blockquotes, comments as bold notes"""
        options = options or ExportOptions(format=ExportFormat.MARKDOWN)
        lines = ["# Annotations Export"]
        if options.file_name:
            lines.append(f"**File**: {options.file_name}")
        lines.append(f"**Exported**: {datetime.now().strftime('%Y-%m-%d %H:%M')}")
        lines.append(f"**Count**: {len(annotation_file.annotations)}")
        lines.extend(["", "---", ""])

        for group_name, items in group_annotations(list(annotation_file.annotations), options.group_by).items():
            if options.group_by != GroupBy.NONE:
                lines.extend([f"## {group_name}", ""])

            for annotation in items:
                meta = self._meta_parts(annotation, options)
                if meta:
                    lines.append(" ".join(f"[{part}]" for part in meta))
                if annotation.content:
                    lines.append(f"> {escape_markdown(annotation.content)}")
                if annotation.comment:
                    lines.extend(["", f"**Note**: {escape_markdown(annotation.comment)}"])
                if options.include_timestamps:
                    lines.extend(["", f"*{format_timestamp(annotation.created_at)}*"])
                lines.extend(["", "---", ""])

        return "\n".join(lines)

    def to_text(self, annotation_file: AnnotationFile, options: Optional[ExportOptions] = None) -> str:
        """Plain text notes"""
        options = options or ExportOptions(format=ExportFormat.TEXT)
        lines = ["Annotations Export", "=" * 40]
        if options.file_name:
            lines.append(f"File: {options.file_name}")
        lines.append(f"Exported: {datetime.now().strftime('%Y-%m-%d %H:%M')}")
        lines.append(f"Count: {len(annotation_file.annotations)}")
        lines.append("")

        for group_name, items in group_annotations(list(annotation_file.annotations), options.group_by).items():
            if options.group_by != GroupBy.NONE:
                lines.extend(["", f"[{group_name}]", "-" * 30])

            for annotation in items:
                lines.append("")
                meta = self._meta_parts(annotation, options)
                if meta:
                    lines.append(f"[{' | '.join(meta)}]")
                if annotation.content:
                    lines.append(f'"{annotation.content}"')
                if annotation.comment:
                    lines.append(f"-> {annotation.comment}")
                if options.include_timestamps:
                    lines.append(f"  ({format_timestamp(annotation.created_at)})")

        return "\n".join(lines)

    def to_json(self, annotation_file: AnnotationFile, options: Optional[ExportOptions] = None) -> str:
        """JSON summary with resolved locations and colour names"""
        options = options or ExportOptions(format=ExportFormat.JSON)
        data = {
            "version": 1,
            "exportedAt": datetime.now().isoformat(),
            "fileId": annotation_file.file_id,
            "fileType": annotation_file.file_type,
            "fileName": options.file_name,
            "annotationCount": len(annotation_file.annotations),
            "annotations": [
                {
                    **annotation.to_dict(),
                    "location": format_location(annotation.target),
                    "colorName": color_name(annotation.style.color),
                }
                for annotation in annotation_file.annotations
            ],
        }
        return json.dumps(data, indent=2, ensure_ascii=False)

    def export(self, annotation_file: AnnotationFile, options: Optional[ExportOptions] = None) -> ExportResult:
        """Export in the format named by the options (default: markdown grouped by page)"""
        options = options or ExportOptions()
        renderers = {
            ExportFormat.MARKDOWN: self.to_markdown,
            ExportFormat.TEXT: self.to_text,
            ExportFormat.JSON: self.to_json,
        }
        return ExportResult(
            content=renderers[options.format](annotation_file, options),
            format=options.format,
            annotation_count=len(annotation_file.annotations),
        )

    def export_to_file(self, annotation_file: AnnotationFile, options: Optional[ExportOptions] = None) -> Path:
        """
        Write a text export to ``<base>-annotations.<md|txt|json>``

        Returns:
            Path to the written file
        """
        options = options or ExportOptions()
        result = self.export(annotation_file, options)
        self.output_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.output_dir / (
            f"{_base_name(annotation_file, options.file_name)}-annotations.{_EXTENSIONS[result.format]}"
        )
        output_path.write_text(result.content, encoding="utf-8")
        return output_path

    def export_flattened_pdf(
        self,
        annotation_file: AnnotationFile,
        pdf_bytes: bytes,
        original_file_name: Optional[str] = None,
    ) -> Tuple[Path, BurnInResult]:
        """
        Burn annotations into the PDF and write ``<base>-annotated.pdf``

        Args:
            annotation_file: Annotations to burn in
            pdf_bytes: Source PDF
            original_file_name: Name of the source PDF (default: fileId)

        Returns:
            Path to the written PDF and the burn-in result with its warnings
        """
        result = export_flattened_pdf(pdf_bytes, annotation_file.annotations)
        for warning in result.warnings:
            logger.warning(f"{annotation_file.file_id}: {warning}")

        self.output_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.output_dir / f"{_base_name(annotation_file, original_file_name)}-annotated.pdf"
        output_path.write_bytes(result.pdf_bytes)
        return output_path, result

    def export_annotations_json(
        self,
        annotation_file: AnnotationFile,
        original_file_name: Optional[str] = None,
    ) -> Path:
        """Write the annotation file itself to ``<base>-annotations.json``"""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        output_path = self.output_dir / f"{_base_name(annotation_file, original_file_name)}-annotations.json"
        output_path.write_text(serialize_annotation_file(annotation_file), encoding="utf-8")
        return output_path

    def export_bundle_bytes(
        self,
        annotation_file: AnnotationFile,
        pdf_bytes: bytes,
        original_file_name: Optional[str] = None,
    ) -> bytes:
        """
        Export a share bundle as a zip archive in memory

        Creates a zip file containing:
        - <base>-annotated.pdf: PDF with annotations burned in
        - annotations.json: The annotation file
        - metadata.json: Counts and burn-in warnings

        Returns:
            Bytes of the zip file
        """
        buffer = io.BytesIO()

        with zipfile.ZipFile(buffer, "w", zipfile.ZIP_DEFLATED) as zf:
            self._write_bundle_to_zip(zf, annotation_file, pdf_bytes, original_file_name)

        buffer.seek(0)
        return buffer.getvalue()

    def export_bundle(
        self,
        annotation_file: AnnotationFile,
        pdf_bytes: bytes,
        original_file_name: Optional[str] = None,
    ) -> Path:
        """Export a share bundle to ``<base>-bundle.zip`` on disk"""
        self.output_dir.mkdir(parents=True, exist_ok=True)
        zip_path = self.output_dir / f"{_base_name(annotation_file, original_file_name)}-bundle.zip"

        with zipfile.ZipFile(zip_path, "w", zipfile.ZIP_DEFLATED) as zf:
            self._write_bundle_to_zip(zf, annotation_file, pdf_bytes, original_file_name)

        return zip_path

    def _write_bundle_to_zip(
        self,
        zf: zipfile.ZipFile,
        annotation_file: AnnotationFile,
        pdf_bytes: bytes,
        original_file_name: Optional[str],
    ) -> None:
        base_name = _base_name(annotation_file, original_file_name)
        result = export_flattened_pdf(pdf_bytes, annotation_file.annotations)

        zf.writestr(f"{base_name}-annotated.pdf", result.pdf_bytes)
        zf.writestr("annotations.json", serialize_annotation_file(annotation_file))

        metadata = {
            "file_id": annotation_file.file_id,
            "file_type": annotation_file.file_type,
            "original_file_name": original_file_name,
            "num_annotations": len(annotation_file.annotations),
            "rects_drawn": result.rects_drawn,
            "notes_drawn": result.notes_drawn,
            "pages_touched": result.pages_touched,
            "warnings": result.warnings,
            "exported_at": datetime.now().isoformat(),
        }
        zf.writestr("metadata.json", json.dumps(metadata, indent=2))
