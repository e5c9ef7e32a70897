"""
Tests for PlotlyBuilder figure construction.
"""
import pytest
import plotly.graph_objects as go

from clinic_outcomes.services.charts import SURFACES, PlotlyBuilder
from clinic_outcomes.services.layout import ChartKind, DrawArea, Point
from clinic_outcomes.services.layout.constants import PIE_ROTATION_DEGREES


@pytest.fixture
def builder():
    return PlotlyBuilder()


def build(builder, kind, snapshot):
    return builder.build(kind, snapshot, SURFACES[kind.value])


class TestBuild:

    @pytest.mark.parametrize("kind", list(ChartKind))
    def test_figure_matches_surface(self, builder, snapshot, kind):
        fig, _ = build(builder, kind, snapshot)
        surface = SURFACES[kind.value]

        assert isinstance(fig, go.Figure)
        assert fig.layout.width == surface.width
        assert fig.layout.height == surface.height
        assert fig.layout.margin.l == surface.padding.left
        assert fig.layout.margin.t == surface.padding.top
        assert fig.layout.showlegend is False

    def test_vertical_stack_has_sentinel_band(self, builder, snapshot):
        fig, labels = build(builder, ChartKind.VERTICAL_STACKED, snapshot)

        assert [trace.y[0] for trace in fig.data] == [2, 82, 15, 1]
        assert fig.layout.barmode == 'stack'
        assert [a.text for a in fig.layout.annotations] == [f"<b>{label.text}</b>" for label in labels]

    def test_pie_trace(self, builder, snapshot):
        fig, labels = build(builder, ChartKind.GMI_PIE, snapshot)

        pie = fig.data[0]
        assert list(pie.values) == [72, 23, 5]
        assert pie.rotation == PIE_ROTATION_DEGREES
        assert pie.direction == 'clockwise'
        assert pie.sort is False
        assert pie.textinfo == 'none'
        # one connector path and one mask disc per label
        assert len(fig.layout.shapes) == 2 * len(labels)

    def test_zero_pie_draws_no_connectors(self, builder, snapshot):
        empty = snapshot.model_copy(update={"gmi": snapshot.gmi.model_copy(
            update={"distribution": snapshot.gmi.distribution.model_copy(
                update={"optimal": 0, "suboptimal": 0, "poor": 0})})})

        fig, labels = build(builder, ChartKind.GMI_PIE, empty)

        assert [shape.type for shape in fig.layout.shapes] == ['circle'] * len(labels)

    def test_scale_dividers_are_drawn(self, builder, snapshot):
        fig, labels = build(builder, ChartKind.HORIZONTAL_SCALE, snapshot)

        paths = [shape for shape in fig.layout.shapes if shape.type == 'path']
        assert len(paths) == sum(1 for label in labels if label.connector)
        assert len(fig.layout.annotations) == len(labels)

    def test_plain_bars_have_no_annotations(self, builder, snapshot):
        for kind in (ChartKind.HORIZONTAL_BAR, ChartKind.GMI_RANGES):
            fig, labels = build(builder, kind, snapshot)

            assert labels == ()
            assert len(fig.layout.annotations) == 0

    def test_accepts_surface_id_string(self, builder, snapshot):
        fig, labels = builder.build("gmiRanges", snapshot, SURFACES["gmiRanges"])

        assert list(fig.data[0].y) == [72, 23, 5]


class TestPaperCoordinates:

    def test_corners(self):
        area = DrawArea(left=20, top=10, right=120, bottom=210)

        assert PlotlyBuilder.to_paper(Point(20, 210), area) == (0.0, 0.0)
        assert PlotlyBuilder.to_paper(Point(120, 10), area) == (1.0, 1.0)
        assert PlotlyBuilder.to_paper(Point(70, 110), area) == (0.5, 0.5)


class TestTooltips:

    def test_toggle(self, builder, snapshot):
        fig, _ = build(builder, ChartKind.GMI_PIE, snapshot)

        builder.set_tooltips(fig, False)
        assert fig.data[0].hoverinfo == 'skip'

        builder.set_tooltips(fig, True)
        assert fig.data[0].hoverinfo == 'all'
