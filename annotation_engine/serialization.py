"""
Versioned JSON serialization for annotation files

Decoding is total: any malformed input yields None (or a result carrying the
validation messages) and is logged, never raised.
"""
import json
import logging
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, List, Optional, Union

from .config import ANNOTATIONS_DIR
from .models import AnnotationFile, FileType
from .validation import validate_annotation_file

logger = logging.getLogger(__name__)

# Characters that are invalid in filenames across platforms
_INVALID_FILENAME_CHARS = re.compile(r'[<>:"/\\|?*\x00-\x1f]')

_EXTENSION_TYPES = {
    ".pdf": FileType.PDF,
    ".pptx": FileType.PPTX,
    ".ppt": FileType.PPTX,
    ".html": FileType.HTML,
    ".htm": FileType.HTML,
}
_EXTENSION_TYPES.update(
    {ext: FileType.IMAGE for ext in (".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".bmp")}
)
_EXTENSION_TYPES.update({
    ext: FileType.CODE
    for ext in (
        ".js", ".ts", ".jsx", ".tsx", ".py", ".java", ".c", ".cpp", ".h", ".hpp", ".cs",
        ".go", ".rs", ".rb", ".php", ".swift", ".kt", ".scala", ".sh", ".bash", ".zsh",
        ".sql", ".json", ".yaml", ".yml", ".xml", ".css", ".scss", ".less", ".md",
        ".markdown",
    )
})


@dataclass
class DeserializationResult:
    """Decoded file (None if invalid) and the reasons it was rejected"""
    file: Optional[AnnotationFile]
    errors: List[str] = field(default_factory=list)


def serialize_annotation_file(annotation_file: AnnotationFile) -> str:
    """Serialize an annotation file to pretty-printed JSON"""
    return json.dumps(annotation_file.to_dict(), indent=2, ensure_ascii=False)


def deserialize_annotation_file_with_validation(text: Any) -> DeserializationResult:
    """
    Decode an annotation file, collecting every validation message.

    Args:
        text: JSON text (str or bytes)

    Returns:
        DeserializationResult with the file, or None and the errors
    """
    if not isinstance(text, (str, bytes, bytearray)):
        return DeserializationResult(None, [f"Expected JSON text, got {type(text).__name__}"])

    try:
        data = json.loads(text)
    except ValueError as e:
        return DeserializationResult(None, [f"JSON parse error: {e}"])

    validation = validate_annotation_file(data)
    if not validation.valid:
        return DeserializationResult(None, validation.errors)

    try:
        return DeserializationResult(AnnotationFile.from_dict(data))
    except (KeyError, TypeError, ValueError) as e:
        return DeserializationResult(None, [f"Invalid annotation file structure: {e}"])


def deserialize_annotation_file(text: Any) -> Optional[AnnotationFile]:
    """Decode an annotation file; None for invalid or corrupted data"""
    result = deserialize_annotation_file_with_validation(text)
    if result.file is None:
        logger.warning(f"Invalid annotation file: {'; '.join(result.errors)}")
    return result.file


def derive_file_id(file_path: Union[str, Path]) -> str:
    """
    Derive a storage-safe file ID from a document path.

    Path separators become dashes, whitespace becomes underscores, and
    characters illegal in filenames are removed. The same path always yields
    the same ID.

    Examples:
        documents/papers/research.pdf -> documents-papers-research.pdf
        my documents/my paper.pdf     -> my_documents-my_paper.pdf

    Raises:
        ValueError: If the path is empty or yields an empty ID
    """
    file_path = str(file_path)
    if not file_path.strip():
        raise ValueError("File path cannot be empty")

    file_id = file_path.replace("\\", "/")
    file_id = re.sub(r"^/+", "", file_id)
    file_id = re.sub(r"/+", "-", file_id)
    file_id = re.sub(r"\s+", "_", file_id)
    file_id = _INVALID_FILENAME_CHARS.sub("", file_id)
    file_id = re.sub(r"-+", "-", file_id)
    file_id = re.sub(r"_+", "_", file_id)
    file_id = re.sub(r"^[-_]+", "", file_id)
    file_id = re.sub(r"[-_]+$", "", file_id)

    if not file_id:
        raise ValueError(f"File path {file_path!r} resulted in empty fileId")
    return file_id


def detect_file_type(file_path: Union[str, Path]) -> FileType:
    """Detect the annotated document's type from its extension"""
    return _EXTENSION_TYPES.get(Path(str(file_path)).suffix.lower(), FileType.UNKNOWN)


def annotation_file_path(file_id: str, base_dir: Optional[Path] = None) -> Path:
    """Sidecar JSON path for a file ID"""
    return Path(base_dir if base_dir is not None else ANNOTATIONS_DIR) / f"{file_id}.json"
