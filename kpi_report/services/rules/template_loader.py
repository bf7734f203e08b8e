"""Usage: load report template configurations from JSON files."""

from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

from kpi_report.services.rules.chart_spec import ReportTemplate


TEMPLATE_DIR = Path(__file__).resolve().parents[2] / "report_templates"


@lru_cache(maxsize=4)
def load_templates(template_dir: Path | None = None) -> list[dict[str, Any]]:
    target_dir = template_dir or TEMPLATE_DIR
    if not target_dir.exists():
        return []

    templates: list[dict[str, Any]] = []
    for path in sorted(target_dir.glob("*.json")):
        data = json.loads(path.read_text(encoding="utf-8"))
        _validate_template(data, source=path)
        data["_source_path"] = str(path)
        templates.append(data)
    return templates


def get_template(name: str, template_dir: Path | None = None) -> ReportTemplate:
    for data in load_templates(template_dir):
        if data.get("name") == name:
            return ReportTemplate.from_dict(data)
    raise ValueError(f"Report template not found: {name}")


def _validate_template(data: dict[str, Any], *, source: Path) -> None:
    required_keys = ("name", "registry", "pages", "charts")
    for key in required_keys:
        if key not in data:
            raise ValueError(f"Template {source} missing required key: {key}")
    if not data["charts"]:
        raise ValueError(f"Template {source} defines no charts")
