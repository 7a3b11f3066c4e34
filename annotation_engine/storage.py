"""
Annotation Storage Service

Saves and loads annotation files as JSON sidecars, one per annotated document.

Directory structure:
    .lattice/annotations/
        <fileId>.json

Version 1 sidecars are migrated transparently on load and can be rewritten
in place with ``migrate_file``/``migrate_all``. There is no locking: the
last writer wins.
"""
import logging
from pathlib import Path
from typing import List, Optional, Union

from .config import ANNOTATIONS_DIR
from .migration import load_annotation_with_migration
from .models import AnnotationFile, FileType, create_annotation_file
from .serialization import annotation_file_path, serialize_annotation_file

logger = logging.getLogger(__name__)


class AnnotationStorage:
    """
    Storage service for annotation files

    Each annotated document has one sidecar:
        <base_path>/<fileId>.json
    """

    def __init__(self, base_path: Path = None):
        """
        Initialize storage service

        Args:
            base_path: Base directory for sidecars (default: ANNOTATIONS_DIR)
        """
        if base_path is None:
            base_path = ANNOTATIONS_DIR
        self.base_path = Path(base_path)
        self.base_path.mkdir(parents=True, exist_ok=True)

    def path_for(self, file_id: str) -> Path:
        """Get the sidecar path for a file ID"""
        return annotation_file_path(file_id, self.base_path)

    def _read(self, file_id: str):
        with open(self.path_for(file_id), "r", encoding="utf-8") as f:
            return load_annotation_with_migration(f.read())

    def save(self, annotation_file: AnnotationFile) -> AnnotationFile:
        """
        Save an annotation file, replacing the whole sidecar

        Args:
            annotation_file: File to save

        Returns:
            The saved file, with its lastModified updated
        """
        saved = annotation_file.touch()
        with open(self.path_for(saved.file_id), "w", encoding="utf-8") as f:
            f.write(serialize_annotation_file(saved))
        return saved

    def load(self, file_id: str) -> Optional[AnnotationFile]:
        """
        Load an annotation file, migrating version 1 sidecars

        Args:
            file_id: File ID

        Returns:
            Loaded file, or None if not found or corrupted
        """
        if not self.exists(file_id):
            return None

        result = self._read(file_id)
        if result.file is None:
            logger.warning(f"Corrupted annotation file for {file_id}: {'; '.join(result.errors)}")
            return None
        if result.was_migrated:
            logger.info(f"Migrated legacy annotations for {file_id} on load")
        return result.file

    def load_or_create(
        self,
        file_id: str,
        file_type: Union[FileType, str] = FileType.UNKNOWN,
    ) -> AnnotationFile:
        """Load an annotation file, or start an empty one if missing or corrupted"""
        annotation_file = self.load(file_id)
        if annotation_file is None:
            return create_annotation_file(file_id, file_type)
        return annotation_file

    def exists(self, file_id: str) -> bool:
        """Check if a sidecar exists"""
        return self.path_for(file_id).is_file()

    def delete(self, file_id: str) -> bool:
        """
        Delete a sidecar

        Returns:
            True if deleted, False if not found
        """
        path = self.path_for(file_id)
        if not path.is_file():
            return False
        path.unlink()
        return True

    def list_files(self) -> List[str]:
        """
        List stored file IDs

        Returns:
            Sorted list of file IDs
        """
        return sorted(p.stem for p in self.base_path.glob("*.json") if p.is_file())

    def migrate_file(self, file_id: str) -> bool:
        """
        Rewrite a version 1 sidecar in place as version 2.

        lastModified is preserved from the legacy file.

        Returns:
            True if migrated, False if already current, not found or unreadable
        """
        if not self.exists(file_id):
            return False

        result = self._read(file_id)
        if not result.was_migrated:
            return False

        with open(self.path_for(file_id), "w", encoding="utf-8") as f:
            f.write(serialize_annotation_file(result.file))
        logger.info(f"Migrated {file_id} to version {result.file.version}")
        return True

    def migrate_all(self) -> List[str]:
        """
        Migrate every version 1 sidecar.

        Returns:
            List of migrated file IDs
        """
        return [file_id for file_id in self.list_files() if self.migrate_file(file_id)]

    def get_file_stats(self, file_id: str) -> Optional[dict]:
        """
        Get statistics for an annotation file

        Returns:
            Dict with stats or None if not found
        """
        annotation_file = self.load(file_id)
        if annotation_file is None:
            return None

        return {
            "file_id": annotation_file.file_id,
            "file_type": annotation_file.file_type,
            "version": annotation_file.version,
            "last_modified": annotation_file.last_modified,
            "num_annotations": len(annotation_file.annotations),
            "commented_annotations": annotation_file.commented_annotations,
            "by_target_type": annotation_file.count_by_target_type(),
        }
