"""
Tests for the AI export bridge
"""
import pytest

from annotation_engine.ai_bridge import (
    export_annotations_for_ai,
    export_annotations_for_line_range,
    export_annotations_for_page,
    export_annotations_grouped_by_type,
    export_annotations_structured,
    export_annotations_with_comments,
    filter_annotations,
    format_annotation_for_ai,
    format_location,
    format_style_type,
    has_comment,
    in_line_range,
    on_page,
)
from annotation_engine.models import AnnotationStyle, CodeLineTarget, create_annotation


class TestFormatting:
    """Tests for single-annotation formatting"""

    def test_pdf_highlight(self, pdf_highlight):
        """Test the full line with content and comment"""
        assert format_annotation_for_ai(pdf_highlight) == (
            "Page 1: [Highlight] 'Quantum entanglement is fascinating' - Note: 'Check this citation'"
        )

    def test_code_line(self, code_annotation):
        assert format_annotation_for_ai(code_annotation) == "Line 42: [Underline] 'function processData()'"

    def test_image_region(self, image_annotation):
        assert format_annotation_for_ai(image_annotation) == "Image region: [Area] 'Figure 3 diagram'"

    def test_comment_without_content(self, anchor_annotation):
        """Test the content segment is omitted when there is none"""
        assert format_annotation_for_ai(anchor_annotation) == "Element slide-2-title: [Text] - Note: 'Rephrase'"

    def test_style_label(self):
        assert format_style_type("strikethrough") == "[Strikethrough]"
        assert format_style_type("ink") == "[Ink]"

    def test_unsupported_target_raises(self):
        with pytest.raises(TypeError):
            format_location(object())


class TestExportForAi:
    """Tests for export_annotations_for_ai"""

    def test_one_line_per_annotation(self, mixed_annotations):
        text = export_annotations_for_ai(mixed_annotations)
        lines = text.split("\n")

        assert len(lines) == 4
        assert lines[0].startswith("Page 1:")
        assert lines[3].startswith("Element slide-2-title:")

    def test_order_preserved(self, mixed_annotations):
        """Test input order is kept rather than sorted"""
        text = export_annotations_for_ai(list(reversed(mixed_annotations)))

        assert text.split("\n")[0].startswith("Element")

    @pytest.mark.parametrize("annotations", [None, []])
    def test_empty(self, annotations):
        assert export_annotations_for_ai(annotations) == ""


class TestFilters:
    """Tests for filtered exports"""

    def test_predicates(self, mixed_annotations):
        assert [a.id for a in filter_annotations(mixed_annotations, on_page(1))] == ["a1"]
        assert filter_annotations(mixed_annotations, on_page(2)) == []
        assert [a.id for a in filter_annotations(mixed_annotations, has_comment)] == ["a1", "t1"]

    @pytest.mark.parametrize("start,end,expected", [
        (40, 45, 1),
        (42, 42, 1),
        (43, 50, 0),
        (1, 41, 0),
    ])
    def test_line_range_inclusive(self, mixed_annotations, start, end, expected):
        assert len(filter_annotations(mixed_annotations, in_line_range(start, end))) == expected

    def test_export_for_page(self, sample_file, code_annotation):
        annotations = list(sample_file.annotations) + [code_annotation]
        text = export_annotations_for_page(annotations, 2)

        assert text == "Page 2: [Highlight] 'A multi-line selection'"

    def test_export_for_line_range(self, code_annotation):
        other = create_annotation(
            target=CodeLineTarget(line=100),
            style=AnnotationStyle(color="red", type="strikethrough"),
            author="bob",
            content="dead code",
        )
        text = export_annotations_for_line_range([code_annotation, other], 90, 110)

        assert text == "Line 100: [Strikethrough] 'dead code'"

    def test_export_with_comments(self, mixed_annotations):
        lines = export_annotations_with_comments(mixed_annotations).split("\n")

        assert len(lines) == 2
        assert all("Note:" in line for line in lines)

    def test_no_matches_gives_empty_string(self, mixed_annotations):
        assert export_annotations_for_page(mixed_annotations, 99) == ""


class TestGroupedExports:
    """Tests for grouped and structured exports"""

    def test_grouped_by_type(self, mixed_annotations, sample_file):
        groups = export_annotations_grouped_by_type(mixed_annotations + list(sample_file.annotations[1:]))

        assert list(groups) == ["pdf", "code_line", "image", "text_anchor"]
        assert groups["pdf"].count("\n") == 1
        assert groups["code_line"] == "Line 42: [Underline] 'function processData()'"

    def test_structured(self, mixed_annotations):
        data = export_annotations_structured(mixed_annotations, "papers-research.pdf")

        assert data["fileId"] == "papers-research.pdf"
        assert data["totalCount"] == 4
        assert data["summary"] == export_annotations_for_ai(mixed_annotations)
        assert data["byType"]["image"] == {"count": 1, "formatted": "Image region: [Area] 'Figure 3 diagram'"}
        assert set(data["byType"]) == {"pdf", "code_line", "image", "text_anchor"}

    def test_structured_empty(self):
        data = export_annotations_structured([], "empty.pdf")

        assert data == {"fileId": "empty.pdf", "totalCount": 0, "summary": "", "byType": {}}
