from __future__ import annotations

import pytest

from kpi_report.schemas.layout import DocumentLayout
from kpi_report.services.pipelines.report import ReportExtractionPipeline
from kpi_report.services.rules.chart_assembler import ChartAssembler, NoChartsDetectedError
from kpi_report.services.rules.region_locator import DeterministicRegionStrategy
from kpi_report.services.rules.template_loader import get_template

from layout_factory import build_network_layout


class FakeLayoutClient:
    def __init__(self, layout: DocumentLayout) -> None:
        self._layout = layout
        self.calls: list[str | None] = []

    async def extract(self, _source, *, filename=None, content_type=None) -> DocumentLayout:
        self.calls.append(filename)
        return self._layout


def _pipeline(layout: DocumentLayout) -> tuple[ReportExtractionPipeline, FakeLayoutClient]:
    template = get_template("network_kpi")
    client = FakeLayoutClient(layout)
    assembler = ChartAssembler(template, DeterministicRegionStrategy(template))
    return ReportExtractionPipeline(client, assembler=assembler), client


@pytest.mark.asyncio
async def test_pipeline_returns_assembled_charts() -> None:
    pipeline, client = _pipeline(build_network_layout())

    result = await pipeline.run(b"%PDF-1.7", filename="network.pdf")

    assert client.calls == ["network.pdf"]
    assert set(result.charts) == {"OETD", "OETD_WA", "OETA", "OETA_WA", "FLAP3", "DISC_FUEL"}
    assert result.warnings == []


@pytest.mark.asyncio
async def test_pipeline_surfaces_warnings_without_failing() -> None:
    pipeline, _ = _pipeline(build_network_layout(drop_value_rows={0}))

    result = await pipeline.run(b"%PDF-1.7")

    assert len(result.charts["OETD"].ranking) == 29
    assert {w.key for w in result.warnings} == {"OETD", "OETD_WA", "OETA", "OETA_WA"}


@pytest.mark.asyncio
async def test_pipeline_propagates_no_chart_error() -> None:
    pipeline, _ = _pipeline(DocumentLayout(pages=[]))

    with pytest.raises(NoChartsDetectedError):
        await pipeline.run(b"%PDF-1.7")
