"""
Shared pytest fixtures for annotation tests
"""
import json

import fitz  # PyMuPDF
import pytest
from PIL import Image

from annotation_engine import (
    AnnotationExporter,
    AnnotationStorage,
    AnnotationStyle,
    BoundingBox,
    CodeLineTarget,
    ImageTarget,
    PdfTarget,
    ShapeRecord,
    TextAnchorTarget,
    create_annotation,
    create_annotation_file,
)

PAGE_WIDTH = 612
PAGE_HEIGHT = 792


@pytest.fixture
def pdf_highlight():
    """PDF highlight with content and a comment"""
    return create_annotation(
        target=PdfTarget(page=1, rects=[BoundingBox(x1=0.1, y1=0.2, x2=0.4, y2=0.25)]),
        style=AnnotationStyle(color="yellow", type="highlight"),
        author="alice",
        content="Quantum entanglement is fascinating",
        comment="Check this citation",
        annotation_id="a1",
        created_at=1700000000000,
    )


@pytest.fixture
def code_annotation():
    """Underline on a source line"""
    return create_annotation(
        target=CodeLineTarget(line=42),
        style=AnnotationStyle(color="blue", type="underline"),
        author="bob",
        content="function processData()",
        annotation_id="c1",
        created_at=1700000001000,
    )


@pytest.fixture
def image_annotation():
    """Area annotation on an image region"""
    return create_annotation(
        target=ImageTarget(x=10, y=20, width=30, height=40),
        style=AnnotationStyle(color="#5FB236", type="area"),
        author="alice",
        content="Figure 3 diagram",
        annotation_id="i1",
        created_at=1700000002000,
    )


@pytest.fixture
def anchor_annotation():
    """Text note anchored in a slide element"""
    return create_annotation(
        target=TextAnchorTarget(element_id="slide-2-title", offset=5),
        style=AnnotationStyle(color="red", type="text"),
        author="carol",
        comment="Rephrase",
        annotation_id="t1",
        created_at=1700000003000,
    )


@pytest.fixture
def mixed_annotations(pdf_highlight, code_annotation, image_annotation, anchor_annotation):
    """One annotation of every target type"""
    return [pdf_highlight, code_annotation, image_annotation, anchor_annotation]


@pytest.fixture
def sample_file(pdf_highlight):
    """Annotation file holding PDF annotations on two pages"""
    second = create_annotation(
        target=PdfTarget(
            page=2,
            rects=[
                BoundingBox(x1=0.1, y1=0.5, x2=0.9, y2=0.52),
                BoundingBox(x1=0.1, y1=0.52, x2=0.5, y2=0.54),
            ],
        ),
        style=AnnotationStyle(color="#FF6666", type="highlight"),
        author="alice",
        content="A multi-line selection",
        annotation_id="a2",
        created_at=1700000005000,
    )
    return create_annotation_file(
        "papers-research.pdf",
        "pdf",
        annotations=[pdf_highlight, second],
        last_modified=1700000010000,
    )


@pytest.fixture
def legacy_annotation_dict():
    """A version 1 annotation as stored on disk"""
    return {
        "id": "legacy-1",
        "fileId": "papers/research.pdf",
        "page": 3,
        "position": {
            "boundingRect": {"x1": 0.1, "y1": 0.2, "x2": 0.4, "y2": 0.3, "width": 800, "height": 600},
            "rects": [{"x1": 0.1, "y1": 0.2, "x2": 0.4, "y2": 0.3, "width": 800, "height": 600}],
        },
        "content": {"text": "Legacy highlighted text"},
        "comment": "Old note",
        "color": "#FFEB3B",
        "timestamp": 1600000000000,
        "type": "text",
    }


@pytest.fixture
def legacy_file_dict(legacy_annotation_dict):
    """A version 1 annotation file"""
    area = dict(legacy_annotation_dict)
    area.update({"id": "legacy-2", "type": "area", "content": {"image": "data:image/png;base64,AAAA"}, "comment": ""})
    return {
        "version": 1,
        "fileId": "papers-research.pdf",
        "annotations": [legacy_annotation_dict, area],
        "lastModified": 1600000005000,
    }


@pytest.fixture
def legacy_json(legacy_file_dict):
    return json.dumps(legacy_file_dict)


@pytest.fixture
def sample_pdf_bytes():
    """Blank three-page Letter PDF"""
    doc = fitz.open()
    for _ in range(3):
        doc.new_page(width=PAGE_WIDTH, height=PAGE_HEIGHT)
    data = doc.tobytes()
    doc.close()
    return data


@pytest.fixture
def sample_shapes():
    """Shapes in absolute pixels on an 800x600 image"""
    return [
        ShapeRecord(id="shape:1", type="geo", x=80, y=60, props={"w": 160, "h": 120, "geo": "rectangle"}),
        ShapeRecord(id="shape:2", type="arrow", x=400, y=300, props={"start": {"x": 0, "y": 0}}, rotation=0.5),
        ShapeRecord(id="shape:3", type="draw", x=0, y=0, props={"w": 800, "h": 600, "segments": [[1, 2]]}, opacity=0.5),
    ]


@pytest.fixture
def sample_image():
    """800x600 test image"""
    return Image.new("RGB", (800, 600), color="white")


@pytest.fixture
def temp_storage(tmp_path):
    """Storage rooted in a temporary directory"""
    return AnnotationStorage(base_path=tmp_path / "annotations")


@pytest.fixture
def temp_exporter(tmp_path):
    """Exporter writing to a temporary directory"""
    return AnnotationExporter(output_dir=tmp_path / "exports")
