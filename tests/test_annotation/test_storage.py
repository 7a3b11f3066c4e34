"""
Tests for annotation storage
"""
import json
import logging

from annotation_engine.models import AnnotationFile, create_annotation_file
from annotation_engine.storage import AnnotationStorage


class TestAnnotationStorage:
    """Tests for AnnotationStorage"""

    def test_creates_base_dir(self, tmp_path):
        """Test the storage directory is created on init"""
        base = tmp_path / "nested" / "annotations"
        AnnotationStorage(base_path=base)

        assert base.is_dir()

    def test_save_and_load(self, temp_storage, sample_file):
        """Test saving and loading an annotation file"""
        saved = temp_storage.save(sample_file)
        loaded = temp_storage.load(sample_file.file_id)

        assert loaded == saved
        assert loaded.annotations == sample_file.annotations
        assert temp_storage.path_for(sample_file.file_id).name == "papers-research.pdf.json"

    def test_save_touches_last_modified(self, temp_storage, sample_file):
        saved = temp_storage.save(sample_file)

        assert saved.last_modified > sample_file.last_modified

    def test_save_replaces_whole_file(self, temp_storage, sample_file):
        """Test the last writer wins"""
        temp_storage.save(sample_file)
        temp_storage.save(sample_file.without_annotation("a1"))

        loaded = temp_storage.load(sample_file.file_id)
        assert [a.id for a in loaded.annotations] == ["a2"]

    def test_load_missing(self, temp_storage):
        assert temp_storage.load("nope.pdf") is None

    def test_load_corrupt_returns_none(self, temp_storage, caplog):
        """Test unreadable sidecars are reported and not raised"""
        temp_storage.path_for("broken.pdf").write_text("{not json", encoding="utf-8")

        with caplog.at_level(logging.WARNING, logger="annotation_engine"):
            assert temp_storage.load("broken.pdf") is None

        assert "Corrupted annotation file" in caplog.text

    def test_load_migrates_legacy(self, temp_storage, legacy_json, caplog):
        """Test version 1 sidecars load as version 2 without rewriting"""
        path = temp_storage.path_for("papers-research.pdf")
        path.write_text(legacy_json, encoding="utf-8")

        with caplog.at_level(logging.INFO, logger="annotation_engine"):
            loaded = temp_storage.load("papers-research.pdf")

        assert loaded.version == 2
        assert [a.id for a in loaded.annotations] == ["legacy-1", "legacy-2"]
        assert json.loads(path.read_text(encoding="utf-8"))["version"] == 1
        assert "Migrated legacy annotations" in caplog.text

    def test_load_or_create(self, temp_storage, sample_file):
        created = temp_storage.load_or_create("new.pdf", "pdf")

        assert isinstance(created, AnnotationFile)
        assert created.file_id == "new.pdf"
        assert created.file_type == "pdf"
        assert created.annotations == ()
        assert not temp_storage.exists("new.pdf")

        temp_storage.save(sample_file)
        assert temp_storage.load_or_create(sample_file.file_id).annotations == sample_file.annotations

    def test_list_and_delete(self, temp_storage, sample_file):
        """Test listing and deleting sidecars"""
        temp_storage.save(sample_file)
        temp_storage.save(create_annotation_file("another.md", "code"))

        assert temp_storage.list_files() == ["another.md", "papers-research.pdf"]

        assert temp_storage.delete("another.md")
        assert not temp_storage.delete("another.md")
        assert temp_storage.list_files() == ["papers-research.pdf"]

    def test_migrate_file(self, temp_storage, legacy_json):
        """Test legacy sidecars are rewritten in place"""
        path = temp_storage.path_for("papers-research.pdf")
        path.write_text(legacy_json, encoding="utf-8")

        assert temp_storage.migrate_file("papers-research.pdf")

        data = json.loads(path.read_text(encoding="utf-8"))
        assert data["version"] == 2
        assert data["fileType"] == "pdf"
        assert data["lastModified"] == 1600000005000

        # Already current
        assert not temp_storage.migrate_file("papers-research.pdf")

    def test_migrate_missing_or_corrupt(self, temp_storage):
        temp_storage.path_for("broken.pdf").write_text("[]", encoding="utf-8")

        assert not temp_storage.migrate_file("missing.pdf")
        assert not temp_storage.migrate_file("broken.pdf")

    def test_migrate_all(self, temp_storage, sample_file, legacy_file_dict):
        temp_storage.save(sample_file)
        for file_id in ("old-a.pdf", "old-b.pdf"):
            legacy_file_dict["fileId"] = file_id
            temp_storage.path_for(file_id).write_text(json.dumps(legacy_file_dict), encoding="utf-8")

        assert temp_storage.migrate_all() == ["old-a.pdf", "old-b.pdf"]
        assert temp_storage.migrate_all() == []

    def test_get_file_stats(self, temp_storage, sample_file):
        """Test getting statistics for a stored file"""
        temp_storage.save(sample_file)
        stats = temp_storage.get_file_stats(sample_file.file_id)

        assert stats["file_id"] == "papers-research.pdf"
        assert stats["file_type"] == "pdf"
        assert stats["version"] == 2
        assert stats["num_annotations"] == 2
        assert stats["commented_annotations"] == 1
        assert stats["by_target_type"] == {"pdf": 2}

    def test_get_file_stats_missing(self, temp_storage):
        assert temp_storage.get_file_stats("nope.pdf") is None

    def test_migrate_unknown_legacy_type_keeps_annotations(self, temp_storage, legacy_file_dict):
        """Test a migrated file with an unlisted style type reloads with all annotations"""
        legacy_file_dict["annotations"][0]["type"] = "strikeout"
        temp_storage.path_for("papers-research.pdf").write_text(json.dumps(legacy_file_dict), encoding="utf-8")

        assert temp_storage.migrate_file("papers-research.pdf")

        loaded = temp_storage.load("papers-research.pdf")
        assert loaded is not None
        assert [a.style.type for a in loaded.annotations] == ["strikeout", "area"]
        assert len(temp_storage.load_or_create("papers-research.pdf").annotations) == 2

    def test_migrate_file_leaves_unmigratable_source(self, temp_storage, legacy_file_dict):
        """Test a legacy sidecar is not overwritten when its migration would be invalid"""
        legacy_file_dict["annotations"][0]["position"]["rects"][0]["x2"] = 1.5
        path = temp_storage.path_for("papers-research.pdf")
        original = json.dumps(legacy_file_dict)
        path.write_text(original, encoding="utf-8")

        assert not temp_storage.migrate_file("papers-research.pdf")
        assert path.read_text(encoding="utf-8") == original
