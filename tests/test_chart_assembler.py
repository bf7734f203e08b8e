from __future__ import annotations

import pytest

from kpi_report.schemas.layout import DocumentLayout, PageLayout
from kpi_report.services.rules.chart_assembler import ChartAssembler, NoChartsDetectedError
from kpi_report.services.rules.region_locator import build_region_strategy
from kpi_report.services.rules.template_loader import get_template

from layout_factory import CODES, build_network_layout, mass_value, percent_value, token


def _assembler(strategy: str = "deterministic") -> ChartAssembler:
    template = get_template("network_kpi")
    return ChartAssembler(template, build_region_strategy(strategy, template))


def test_assembles_every_chart_of_network_report() -> None:
    result = _assembler().assemble(build_network_layout())

    assert list(result.charts) == ["OETD", "OETD_WA", "OETA", "OETA_WA", "FLAP3", "DISC_FUEL"]
    oetd = result.charts["OETD"]
    assert oetd.target == 80
    assert oetd.network_avg == 58
    assert [(e.code, e.value) for e in oetd.ranking] == [
        (code, percent_value(row)) for row, code in enumerate(CODES)
    ]
    assert result.charts["OETD_WA"].target == 85
    assert result.charts["OETA"].target == 70
    assert result.charts["OETA_WA"].network_avg == 67
    assert result.codes == CODES
    assert result.warnings == []


def test_page_two_charts_have_no_network_average() -> None:
    result = _assembler().assemble(build_network_layout())

    flap3 = result.charts["FLAP3"]
    disc = result.charts["DISC_FUEL"]
    assert flap3.target == 90
    assert flap3.network_avg is None
    assert disc.target == 300
    assert disc.network_avg is None
    assert [e.value for e in disc.ranking] == [mass_value(row) for row in range(30)]


def test_debug_regions_record_counts() -> None:
    result = _assembler().assemble(build_network_layout())

    assert [(r.page, r.key) for r in result.debug_regions] == [
        (1, "OETD"),
        (1, "OETD_WA"),
        (1, "OETA"),
        (1, "OETA_WA"),
        (2, "FLAP3"),
        (2, "DISC_FUEL"),
    ]
    for region in result.debug_regions:
        chart = result.charts[region.key]
        assert region.label_count == 30
        assert region.value_count == 30
        assert len(chart.ranking) <= min(region.label_count, region.value_count)
        codes = [e.code for e in chart.ranking]
        assert len(codes) == len(set(codes))


def test_assembly_is_deterministic() -> None:
    layout = build_network_layout(drop_value_rows={4, 17})
    assembler = _assembler()

    first = assembler.assemble(layout)
    second = assembler.assemble(layout)

    assert first.model_dump() == second.model_dump()


def test_missing_values_raise_structural_warning() -> None:
    result = _assembler().assemble(build_network_layout(drop_value_rows={4, 17}))

    keys = {warning.key for warning in result.warnings}
    assert keys == {"OETD", "OETD_WA", "OETA", "OETA_WA"}
    warning = result.warnings[0]
    assert warning.kind == "tokens_missing"
    assert warning.expected == 30
    assert warning.actual == 28
    assert warning.value_count == 28
    assert "parsing gap" in warning.message


def test_unpaired_value_reports_pairing_gap() -> None:
    layout = build_network_layout(include_page2=False)
    page = layout.page(1)
    moved = []
    for item in page.tokens:
        # push OETD's last value far below its label, still inside the region
        if item.text == f"{percent_value(29)}%" and item.x == 150:
            item = token(item.text, item.x, 920)
        moved.append(item)
    layout = DocumentLayout(pages=[PageLayout(page_number=1, width=800, height=1000, tokens=moved)])

    result = _assembler().assemble(layout)

    oetd_warning = next(w for w in result.warnings if w.key == "OETD")
    assert oetd_warning.kind == "pairs_missing"
    assert oetd_warning.actual == 29
    assert len(result.charts["OETD"].ranking) == 29


def test_missing_title_drops_chart_in_title_mode_only() -> None:
    layout = build_network_layout(drop_titles={"OETD"}, include_page2=False)

    by_title = _assembler("title").assemble(layout)
    by_geometry = _assembler("deterministic").assemble(layout)

    assert "OETD" not in by_title.charts
    assert {"OETD_WA", "OETA", "OETA_WA"} <= set(by_title.charts)
    assert "OETD" not in {r.key for r in by_title.debug_regions}
    assert by_geometry.charts["OETD"].target is None
    assert len(by_geometry.charts["OETD"].ranking) == 30


def test_chart_without_pairs_is_debugged_but_omitted() -> None:
    layout = build_network_layout(drop_value_rows=set(range(30)))

    result = _assembler().assemble(layout)

    assert "OETD" not in result.charts
    oetd_region = next(r for r in result.debug_regions if r.key == "OETD")
    assert oetd_region.label_count == 30
    assert oetd_region.value_count == 0
    assert set(result.charts) == {"FLAP3", "DISC_FUEL"}


def test_no_charts_in_document_raises() -> None:
    layout = DocumentLayout(
        pages=[
            PageLayout(
                page_number=1,
                width=800,
                height=1000,
                tokens=[token("Quarterly newsletter", 20, 40), token("42%", 300, 300)],
            )
        ]
    )

    with pytest.raises(NoChartsDetectedError):
        _assembler().assemble(layout)


def test_empty_document_raises() -> None:
    with pytest.raises(NoChartsDetectedError):
        _assembler().assemble(DocumentLayout(pages=[]))


def test_value_equal_to_axis_tick_is_not_a_row() -> None:
    layout = build_network_layout(include_page2=False)
    page = layout.page(1)
    tokens = [
        token("75%", item.x, item.y) if item.text == f"{percent_value(11)}%" and item.x == 150 else item
        for item in page.tokens
    ]
    layout = DocumentLayout(pages=[PageLayout(page_number=1, width=800, height=1000, tokens=tokens)])

    result = _assembler().assemble(layout)

    oetd = result.charts["OETD"]
    assert CODES[11] not in [e.code for e in oetd.ranking]
    assert 75 not in [e.value for e in oetd.ranking]
    warning = next(w for w in result.warnings if w.key == "OETD")
    assert warning.kind == "tokens_missing"
    assert warning.value_count == 29


def test_title_mode_separates_page_two_charts() -> None:
    result = _assembler("title").assemble(build_network_layout())

    regions = {r.key: r for r in result.debug_regions if r.page == 2}
    assert regions["FLAP3"].rect != regions["DISC_FUEL"].rect
    assert regions["FLAP3"].rect.x2 <= regions["DISC_FUEL"].rect.x1
    assert [(e.code, e.value) for e in result.charts["FLAP3"].ranking] == [
        (code, percent_value(row)) for row, code in enumerate(CODES)
    ]
    assert [e.value for e in result.charts["DISC_FUEL"].ranking] == [mass_value(row) for row in range(30)]
    assert result.charts["FLAP3"].target == 90
    assert result.charts["DISC_FUEL"].target == 300
