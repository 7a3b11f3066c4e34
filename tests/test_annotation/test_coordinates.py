"""
Tests for coordinate transforms
"""
import pytest

from annotation_engine.coordinates import (
    BoundingBox,
    Point,
    Rect,
    absolute_rect_to_percentage,
    absolute_to_percentage,
    approx_equal,
    calculate_bounding_box,
    denormalize_rect,
    denormalize_rects,
    is_point_in_rect,
    normalize_rect,
    normalize_rects,
    normalized_to_points,
    percentage_rect_to_absolute,
    percentage_to_absolute,
    points_to_normalized,
    rects_approx_equal,
    round_trip_tolerance,
)

CANVAS_SIZES = [(800, 600), (1, 1), (1920.5, 1080.25), (10000, 3)]
PAGE_SIZES = [(612, 792), (595.28, 841.89), (100, 100)]


class TestCanvasTransforms:
    """Tests for absolute <-> percentage conversion"""

    def test_point_to_percentage(self):
        """Test a point converts linearly to percentages"""
        result = absolute_to_percentage(Point(400, 150), 800, 600)

        assert result == Point(x=50.0, y=25.0)

    def test_percentage_to_point(self):
        """Test percentages convert back to pixels"""
        result = percentage_to_absolute(Point(50, 25), 800, 600)

        assert result == Point(x=400.0, y=150.0)

    def test_rect_width_and_height_scale_independently(self):
        """Test rect size uses width for width and height for height"""
        result = absolute_rect_to_percentage(Rect(80, 60, 160, 300), 800, 600)

        assert rects_approx_equal(result, Rect(10, 10, 20, 50))

    @pytest.mark.parametrize("width,height", CANVAS_SIZES)
    @pytest.mark.parametrize("rect", [Rect(0, 0, 0, 0), Rect(0.5, 0.25, 0.1, 0.2), Rect(10, 20, 300, 400)])
    def test_rect_round_trip(self, rect, width, height):
        """Test absolute -> percentage -> absolute returns the original rect"""
        result = percentage_rect_to_absolute(absolute_rect_to_percentage(rect, width, height), width, height)

        assert rects_approx_equal(result, rect, round_trip_tolerance(width, height))

    @pytest.mark.parametrize("width,height", [(0, 600), (800, 0), (-1, 600), (800, -5)])
    def test_non_positive_dimensions_raise(self, width, height):
        """Test degenerate canvas sizes are rejected rather than clamped"""
        with pytest.raises(ValueError):
            absolute_to_percentage(Point(1, 1), width, height)
        with pytest.raises(ValueError):
            percentage_to_absolute(Point(1, 1), width, height)
        with pytest.raises(ValueError):
            absolute_rect_to_percentage(Rect(1, 1, 1, 1), width, height)
        with pytest.raises(ValueError):
            percentage_rect_to_absolute(Rect(1, 1, 1, 1), width, height)

    def test_values_outside_canvas_are_not_clamped(self):
        """Test points beyond the canvas give percentages beyond 100"""
        result = absolute_to_percentage(Point(1600, -60), 800, 600)

        assert result == Point(x=200.0, y=-10.0)


class TestPageTransforms:
    """Tests for normalized <-> page point conversion"""

    def test_normalized_to_points_flips_y(self):
        """Test the box's bottom edge becomes the page-space y"""
        box = BoundingBox(x1=0.1, y1=0.2, x2=0.4, y2=0.25)
        result = normalized_to_points(box, 612, 792)

        expected = Rect(x=61.2, y=792 - 0.25 * 792, width=0.3 * 612, height=0.05 * 792)
        assert rects_approx_equal(result, expected)

    def test_full_page_box(self):
        """Test the whole page maps to the page rect"""
        result = normalized_to_points(BoundingBox(0, 0, 1, 1), 612, 792)

        assert rects_approx_equal(result, Rect(0, 0, 612, 792))

    def test_top_strip_lands_at_top_of_page(self):
        """Test a box at the top in normalized space is high in page space"""
        result = normalized_to_points(BoundingBox(0, 0, 1, 0.1), 612, 792)

        assert approx_equal(result.y + result.height, 792)

    @pytest.mark.parametrize("width,height", PAGE_SIZES)
    @pytest.mark.parametrize("box", [
        BoundingBox(0, 0, 1, 1),
        BoundingBox(0.1, 0.2, 0.4, 0.25),
        BoundingBox(0.333, 0.666, 0.999, 0.9999),
        BoundingBox(0.5, 0.5, 0.5, 0.5),
    ])
    def test_points_round_trip(self, box, width, height):
        """Test normalized -> points -> normalized returns the original box"""
        result = points_to_normalized(normalized_to_points(box, width, height), width, height)

        assert rects_approx_equal(result, box)

    def test_page_transform_rejects_zero_page(self):
        """Test a zero-height page raises"""
        with pytest.raises(ValueError):
            normalized_to_points(BoundingBox(0, 0, 1, 1), 612, 0)
        with pytest.raises(ValueError):
            points_to_normalized(Rect(0, 0, 1, 1), 0, 792)


class TestRenderedPageTransforms:
    """Tests for pixel rect <-> normalized box on a rendered page"""

    def test_normalize_rect(self):
        """Test pixel rect normalizes without a flip"""
        result = normalize_rect(Rect(100, 200, 300, 50), 1000, 1000)

        assert rects_approx_equal(result, BoundingBox(0.1, 0.2, 0.4, 0.25))

    def test_denormalize_at_different_zoom(self):
        """Test a box renders at the right place at twice the size"""
        box = normalize_rect(Rect(100, 200, 300, 50), 1000, 1000)
        result = denormalize_rect(box, 2000, 2000)

        assert rects_approx_equal(result, Rect(200, 400, 600, 100))

    def test_list_variants_preserve_order(self):
        """Test multi-line selections keep their order"""
        rects = [Rect(0, 0, 10, 10), Rect(0, 10, 20, 10), Rect(0, 20, 5, 10)]
        boxes = normalize_rects(rects, 100, 100)
        restored = denormalize_rects(boxes, 100, 100)

        assert len(restored) == 3
        for original, result in zip(rects, restored):
            assert rects_approx_equal(original, result)


class TestGeometryHelpers:
    """Tests for bounding box and comparison helpers"""

    def test_bounding_box_of_rects(self):
        """Test the union of rects"""
        result = calculate_bounding_box([Rect(10, 10, 10, 10), Rect(30, 5, 5, 30)])

        assert result == Rect(x=10, y=5, width=25, height=30)

    def test_bounding_box_empty(self):
        """Test empty input gives a zero rect"""
        assert calculate_bounding_box([]) == Rect(0, 0, 0, 0)

    def test_point_in_rect_includes_edges(self):
        """Test edge points count as inside"""
        rect = Rect(0, 0, 10, 10)

        assert is_point_in_rect(Point(10, 10), rect)
        assert is_point_in_rect(Point(5, 5), rect)
        assert not is_point_in_rect(Point(10.1, 5), rect)

    def test_compare_different_kinds_raises(self):
        """Test comparing a Rect with a BoundingBox is an error"""
        with pytest.raises(TypeError):
            rects_approx_equal(Rect(0, 0, 1, 1), BoundingBox(0, 0, 1, 1))

    def test_round_trip_tolerance_scales_with_dimensions(self):
        """Test tolerance is relative to the largest dimension"""
        assert round_trip_tolerance(800, 600) == pytest.approx(0.08)

    def test_to_dict_from_dict(self):
        """Test value types convert to and from dicts"""
        box = BoundingBox(0.1, 0.2, 0.3, 0.4)

        assert BoundingBox.from_dict(box.to_dict()) == box
        assert box.to_dict() == {"x1": 0.1, "y1": 0.2, "x2": 0.3, "y2": 0.4}
        assert box.width == pytest.approx(0.2)
