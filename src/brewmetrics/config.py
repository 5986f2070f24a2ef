"""
BrewMetrics configuration management.

Supports loading from YAML files, environment variables, and keyword overrides.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, model_validator


class CostingConfig(BaseModel):
    """COGS ratio banding used by the recipe cost engine."""

    healthy_below: float = Field(default=20.0, ge=0.0, description="Ratios below this are healthy")
    critical_from: float = Field(default=30.0, ge=0.0, description="Ratios at or above this are critical")

    @model_validator(mode="after")
    def _check_bands(self) -> CostingConfig:
        if self.critical_from < self.healthy_below:
            raise ValueError("critical_from must be >= healthy_below")
        return self


class InventoryConfig(BaseModel):
    """Stock coverage settings."""

    warning_buffer_days: float = Field(
        default=2.0,
        ge=0.0,
        description="Days past lead time that still count as a warning",
    )
    display_cover_cap: float = Field(
        default=100.0,
        gt=0.0,
        description="Covers above this render as infinite in reports",
    )


class AnalyticsConfig(BaseModel):
    """Period analytics settings."""

    top_items_limit: int = Field(default=5, ge=1)
    open_hour: int = Field(default=8, ge=0, le=23)
    close_hour: int = Field(default=22, ge=0, le=23)
    friday_is_weekend: bool = False


class FinancialsConfig(BaseModel):
    """Month-to-date P&L settings."""

    estimated_cogs_ratio: float = Field(default=0.35, ge=0.0, le=1.0)
    include_utilities: bool = True


class BrewMetricsConfig(BaseModel):
    """Root configuration for BrewMetrics."""

    costing: CostingConfig = Field(default_factory=CostingConfig)
    inventory: InventoryConfig = Field(default_factory=InventoryConfig)
    analytics: AnalyticsConfig = Field(default_factory=AnalyticsConfig)
    financials: FinancialsConfig = Field(default_factory=FinancialsConfig)

    # Output settings
    currency: str = Field(default="KRW")

    @classmethod
    def load(cls, config_path: str | None = None, **overrides: Any) -> BrewMetricsConfig:
        """Load configuration from file, env vars, and overrides.

        Priority: overrides > env vars > config file > defaults.
        """
        data: dict[str, Any] = {}

        # 1. Load from YAML file if provided
        if config_path:
            path = Path(config_path)
            if path.exists():
                with open(path) as f:
                    data = yaml.safe_load(f) or {}

        # 2. Override from environment variables
        env_currency = os.environ.get("BREWMETRICS_CURRENCY")
        env_cogs = os.environ.get("BREWMETRICS_COGS_RATIO")
        env_friday = os.environ.get("BREWMETRICS_FRIDAY_WEEKEND")

        if env_currency:
            data["currency"] = env_currency

        if env_cogs:
            financials = data.get("financials", {})
            financials["estimated_cogs_ratio"] = float(env_cogs)
            data["financials"] = financials

        if env_friday:
            analytics = data.get("analytics", {})
            analytics["friday_is_weekend"] = env_friday.lower() in ("1", "true", "yes")
            data["analytics"] = analytics

        # 3. Apply keyword overrides
        data.update(overrides)

        return cls.model_validate(data)
