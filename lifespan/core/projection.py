from __future__ import annotations

import logging
from functools import lru_cache
from typing import List, Optional

from lifespan.config import PROJECTION_CACHE_SIZE
from lifespan.schemas.projection import (
    ProjectionParams,
    ProjectionResult,
    ProjectionSummary,
    YearPoint,
)

logger = logging.getLogger(__name__)


class ProjectionError(ValueError):
    """Raised when parameters put the projection outside its defined domain."""


def ratio_base(inflation_rate: float, growth_rate: float) -> float:
    """Per-period growth of expenses relative to the asset: (1 + i) / (1 + a)."""
    if growth_rate == -1:
        raise ProjectionError("growth rate of -100% leaves the expense/asset ratio undefined")
    return (1 + inflation_rate) / (1 + growth_rate)


def lifespan_inflation_factor(inflation_rate: float, growth_rate: float, years: int) -> float:
    """LIF = ((1 + i) / (1 + a))^T - 1."""
    return ratio_base(inflation_rate, growth_rate) ** years - 1


def project(params: ProjectionParams) -> ProjectionResult:
    """
    Build the year-by-year series for k = 0..T (inclusive) and its summary.

    Per period k:
      1) Inflate the base expense: E0 * (1 + i)^k.
      2) Grow the asset price: P0_price * (1 + a)^k, or the bare index (1 + a)^k
         when no price is given, and express USD values in asset units with it.
      3) For k >= 1 only: add this year's expense to the running totals and
         draw it from the portfolio after a year of growth.
    Period 0 is the starting point and carries no flow.
    """
    i = params.inflation_rate
    a = params.growth_rate
    years = params.years
    base = ratio_base(i, a)
    price0 = params.starting_price if params.starting_price is not None else 1.0

    points: List[YearPoint] = []
    total_usd = 0.0
    total_asset = 0.0
    portfolio: Optional[float] = params.starting_portfolio
    depletion: Optional[int] = None

    for k in range(years + 1):
        asset_index = (1 + a) ** k
        asset_price = price0 * asset_index
        expense_usd = params.annual_expense * (1 + i) ** k
        expense_asset = expense_usd / asset_price

        if k > 0:
            total_usd += expense_usd
            total_asset += expense_asset

            if portfolio is not None:
                portfolio = portfolio * (1 + a) - expense_usd
                if depletion is None and portfolio <= 0:
                    depletion = k

        points.append(
            YearPoint(
                year=k,
                ratio=base**k,
                nominal_expense=expense_usd,
                asset_index=asset_index,
                asset_price=asset_price,
                asset_expense=expense_asset,
                cumulative_expense=total_usd,
                cumulative_asset_expense=total_asset,
                portfolio=portfolio,
                asset_portfolio=portfolio / asset_price if portfolio is not None else None,
            )
        )

    final = points[-1]
    lif = base**years - 1

    summary = ProjectionSummary(
        lifespan_inflation_factor=lif,
        lifespan_inflation_percent=lif * 100,
        final_ratio=final.ratio,
        final_expense=final.nominal_expense,
        final_asset_expense=final.asset_expense,
        total_expenses=total_usd,
        total_asset_expenses=total_asset,
        # T == 0 has no flow years to average over
        average_expense=total_usd / years if years > 0 else 0.0,
        average_asset_expense=total_asset / years if years > 0 else 0.0,
        final_portfolio=final.portfolio,
        final_asset_portfolio=final.asset_portfolio,
        depletion_year=depletion,
    )

    logger.debug(
        "Projected %d years: LIF=%.4f depletion=%s", years, lif, depletion
    )
    return ProjectionResult(series=points, summary=summary)


@lru_cache(maxsize=PROJECTION_CACHE_SIZE)
def cached_project(params: ProjectionParams) -> ProjectionResult:
    """Memoized ``project``; params are frozen, so identical inputs share a result.

    The returned result is shared between callers and must not be mutated.
    """
    return project(params)
