"""Data contracts for lifespan inflation projections."""

from __future__ import annotations

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field, field_validator

from lifespan import config
from lifespan.core.inputs import clamp, coerce_number


class Units(str, Enum):
    USD = "USD"
    BTC = "BTC"


class ProjectionParams(BaseModel):
    """Inputs for one projection. Rates are fractional (0.03 == 3%)."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    inflation_rate: float = Field(..., ge=0, description="Annual inflation rate i.")
    growth_rate: float = Field(
        ...,
        gt=-1,
        description="Annual asset growth rate a. -100% would make the ratio undefined.",
    )
    years: int = Field(..., ge=0, description="Horizon T in periods.")
    annual_expense: float = Field(..., ge=0, description="Expense at period 0 (E0).")
    starting_portfolio: Optional[float] = Field(
        None, ge=0, description="Portfolio at period 0 in USD; omit to skip the drawdown model."
    )
    starting_price: Optional[float] = Field(
        None, gt=0, description="Asset price in USD at period 0; omit to use index units."
    )


class YearPoint(BaseModel):
    """Single row of a projection series."""

    year: int = Field(..., ge=0)
    ratio: float
    nominal_expense: float
    asset_index: float
    asset_price: float
    asset_expense: float
    cumulative_expense: float
    cumulative_asset_expense: float
    # None when no starting portfolio was given.
    portfolio: Optional[float] = None
    asset_portfolio: Optional[float] = None


class ProjectionSummary(BaseModel):
    lifespan_inflation_factor: float
    lifespan_inflation_percent: float
    final_ratio: float
    final_expense: float
    final_asset_expense: float
    total_expenses: float
    total_asset_expenses: float
    average_expense: float
    average_asset_expense: float
    final_portfolio: Optional[float] = None
    final_asset_portfolio: Optional[float] = None
    depletion_year: Optional[int] = None

    @computed_field
    @property
    def depleted(self) -> bool:
        return self.depletion_year is not None


class ProjectionResult(BaseModel):
    """Year-by-year series plus scalar aggregates."""

    series: List[YearPoint]
    summary: ProjectionSummary


class ProjectionRequest(BaseModel):
    """Calculator state as posted by the frontend.

    Rates arrive as percentages, like the sliders that produce them. Values
    outside a slider's range are clamped rather than rejected, and the expense
    box turns anything non-numeric into 0.
    """

    inflationPercent: float = config.DEFAULT_INFLATION_PERCENT
    assetGrowthPercent: float = config.DEFAULT_ASSET_GROWTH_PERCENT
    extraYears: int = config.DEFAULT_EXTRA_YEARS
    annualExpenseToday: float = config.DEFAULT_ANNUAL_EXPENSE
    startingPortfolio: Optional[float] = config.DEFAULT_STARTING_PORTFOLIO
    usePrice: bool = False
    # price this client last had accepted; echoed back as "price" in the response
    lastGoodPrice: Optional[str] = None
    priceOverride: Optional[str] = None
    units: Units = Units.USD

    # NaN survives min/max, so non-finite slider values reset to the default first

    @field_validator("inflationPercent")
    @classmethod
    def _clamp_inflation(cls, value: float) -> float:
        value = coerce_number(value, default=config.DEFAULT_INFLATION_PERCENT)
        return clamp(value, *config.INFLATION_PERCENT_RANGE)

    @field_validator("assetGrowthPercent")
    @classmethod
    def _clamp_growth(cls, value: float) -> float:
        value = coerce_number(value, default=config.DEFAULT_ASSET_GROWTH_PERCENT)
        return clamp(value, *config.ASSET_GROWTH_PERCENT_RANGE)

    @field_validator("extraYears")
    @classmethod
    def _clamp_years(cls, value: int) -> int:
        low, high = config.EXTRA_YEARS_RANGE
        return int(clamp(value, low, high))

    @field_validator("annualExpenseToday", mode="before")
    @classmethod
    def _coerce_expense(cls, value: object) -> float:
        return clamp(coerce_number(value), *config.ANNUAL_EXPENSE_RANGE)

    @field_validator("startingPortfolio")
    @classmethod
    def _clamp_portfolio(cls, value: Optional[float]) -> Optional[float]:
        if value is None:
            return None
        value = coerce_number(value, default=config.DEFAULT_STARTING_PORTFOLIO)
        return clamp(value, *config.STARTING_PORTFOLIO_RANGE)

    @field_validator("lastGoodPrice", "priceOverride", mode="before")
    @classmethod
    def _stringify_price(cls, value: object) -> Optional[str]:
        # Prices are checked later against the fallback chain, never rejected here.
        if value is None:
            return None
        return str(value)

    def to_params(self, starting_price: Optional[float] = None) -> ProjectionParams:
        return ProjectionParams(
            inflation_rate=self.inflationPercent / 100,
            growth_rate=self.assetGrowthPercent / 100,
            years=self.extraYears,
            annual_expense=self.annualExpenseToday,
            starting_portfolio=self.startingPortfolio,
            starting_price=starting_price if self.usePrice else None,
        )


class PriceQuoteResponse(BaseModel):
    asset: str
    price: float
    source: str
    lastUpdatedAt: Optional[int] = None
    warning: Optional[str] = None
