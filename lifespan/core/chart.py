"""Line-chart series for the expense/portfolio chart."""

from __future__ import annotations

from typing import Any, Dict, List

from lifespan.schemas.projection import ProjectionResult, Units

# (usd field, asset field, legend name)
_LINES = (
    ("nominal_expense", "asset_expense", "Annual Expense"),
    ("portfolio", "asset_portfolio", "Portfolio Balance"),
)


def chart_series(result: ProjectionResult, units: Units) -> Dict[str, Any]:
    """Pick the USD or asset-denominated fields for each line by unit."""
    lines: List[Dict[str, Any]] = []
    for usd_key, asset_key, name in _LINES:
        key = usd_key if units is Units.USD else asset_key
        values = [getattr(point, key) for point in result.series]
        if any(value is None for value in values):
            # no starting portfolio, nothing to draw
            continue
        lines.append({"key": key, "name": name, "values": values})

    return {
        "x": [point.year for point in result.series],
        "units": units.value,
        "lines": lines,
    }
