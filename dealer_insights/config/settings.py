"""
Dealer Insights Engine
Centralized Configuration Management

Business-policy thresholds and runtime settings, loaded with Pydantic settings
so every heuristic can be overridden from the environment (``INSIGHTS_*``)
or a ``.env`` file without touching code.
"""

from functools import lru_cache
from typing import Optional
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class InsightsPolicy(BaseSettings):
    """
    Business heuristics used by the analytics engine.

    None of these values are fitted models; they are policy and are expected
    to change. Tests construct policies directly to exercise other thresholds.
    """

    model_config = SettingsConfigDict(env_prefix="INSIGHTS_")

    # Order classification (width / depth)
    stocking_min_skus: int = Field(default=8, description="Distinct SKUs for a wide stocking order")
    stocking_max_depth: float = Field(default=2.0, description="Stocking orders average fewer units per SKU than this")
    project_min_depth: float = Field(default=4.0, description="Project orders average more units per SKU than this")

    # Trend smoothing
    retail_trend_window: int = Field(default=12, description="Retail trend WMA window in weeks")
    signal_window: int = Field(default=4, description="Fast revenue WMA window in weeks")
    baseline_window: int = Field(default=12, description="Slow revenue WMA window in weeks")

    # Momentum ranking
    momentum_window_days: int = Field(default=365, description="Rolling L12M window length")
    momentum_min_weeks: int = Field(default=4, description="Minimum weeks of history for momentum")
    min_stocking_dealers: int = Field(default=1, description="Sample-size gate (relaxed from 3)")
    rent_payer_top_fraction: float = Field(default=0.2, description="Top share of ARPD ranking marked rent-payer")
    rent_payer_min_count: int = Field(default=0, description="Minimum number of rent-payers")
    rising_star_delta: float = Field(default=15.0, description="Momentum delta (%) for rising stars")
    decelerating_delta: float = Field(default=-10.0, description="Momentum delta (%) for decelerating")
    high_value_arpd: float = Field(default=5000.0, description="ARPD bar for high-value-stable")
    high_ticket_unit_price: float = Field(default=2500.0, description="Average unit price for high-ticket flag")

    # Collection performance and quadrants
    high_sales_velocity: float = Field(default=0.3, description="Velocity index above which sales are high")
    default_market_presence: float = Field(default=2.0, description="Fallback displays per showroom")
    above_average_lift_rate: float = Field(default=0.10, description="Incremental lift for above-average performers")
    display_cost: float = Field(default=500.0, description="Assumed cost of one display")
    days_per_month: float = Field(default=30.0, description="Days per month for months-on-floor")

    # Asset health
    star_turn_multiplier: float = Field(default=1.2, description="Turns vs benchmark for star performers")
    drag_turn_rate: float = Field(default=1.0, description="Turns per year below which a display is a drag")
    swap_unit_floor: float = Field(default=0.0, description="Units at or below which a displayed SKU may be swapped")
    swap_grace_months: float = Field(default=3.0, description="Months on floor before a SKU can be swapped")

    # Opportunities
    opportunity_max_index: float = Field(default=0.8, description="Performance index below which a collection is an opportunity")
    opportunity_min_territory_revenue: float = Field(default=5000.0, description="Territory revenue needed for an opportunity")
    opportunity_limit: int = Field(default=10, description="Opportunity collections returned")

    # Velocity leaderboard
    leaderboard_min_weeks: int = Field(default=3, description="Minimum weeks for the leaderboard")
    leaderboard_trend_band: float = Field(default=5.0, description="Percent change treated as flat")
    leaderboard_sparkline_weeks: int = Field(default=6, description="Weeks of sparkline data")
    new_intro_days: int = Field(default=183, description="First sale within this many days is a new intro")
    hot_intro_rank_jump: int = Field(default=10, description="Rank jump for a hot new intro")

    @field_validator(
        "retail_trend_window",
        "signal_window",
        "baseline_window",
        "momentum_window_days",
        "stocking_min_skus",
    )
    @classmethod
    def validate_positive_int(cls, v: int) -> int:
        """Windows and counts must be at least one"""
        if v < 1:
            raise ValueError("must be >= 1")
        return v

    @field_validator("rent_payer_top_fraction")
    @classmethod
    def validate_fraction(cls, v: float) -> float:
        """Top fraction is a share of the ranking"""
        if not 0 < v <= 1:
            raise ValueError("must be in (0, 1]")
        return v

    @model_validator(mode="after")
    def validate_momentum_bands(self) -> "InsightsPolicy":
        """Rising and decelerating bands must not overlap"""
        if self.decelerating_delta >= self.rising_star_delta:
            raise ValueError("decelerating_delta must be below rising_star_delta")
        return self


class MonitoringSettings(BaseSettings):
    """Logging Configuration"""

    model_config = SettingsConfigDict(env_prefix="")

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log format: json or console")

    @field_validator("log_format")
    @classmethod
    def validate_format(cls, v: str) -> str:
        """Validate renderer name"""
        allowed = ["json", "console"]
        if v.lower() not in allowed:
            raise ValueError(f"Log format must be one of: {allowed}")
        return v.lower()


class Settings(BaseSettings):
    """
    Main Application Settings

    Aggregates all configuration sections and provides a single entry point
    for accessing application configuration.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = Field(default="dealer-insights", description="Application name")
    app_env: str = Field(default="development", description="Environment")
    debug: bool = Field(default=False, description="Debug mode")

    # Version
    version: str = Field(default="1.0.0", description="Application version")

    # Optional fixed reference date (YYYY-MM-DD) for reproducible runs
    as_of: Optional[str] = Field(default=None, description="Reference date override")

    # Subsystem configurations
    policy: InsightsPolicy = Field(default_factory=InsightsPolicy)
    monitoring: MonitoringSettings = Field(default_factory=MonitoringSettings)

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, v: str) -> str:
        """Validate environment value"""
        allowed = ["development", "staging", "production", "testing"]
        if v.lower() not in allowed:
            raise ValueError(f"Environment must be one of: {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production"""
        return self.app_env == "production"


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached application settings.

    Returns:
        Settings: Application settings instance
    """
    return Settings()


def get_policy() -> InsightsPolicy:
    """Default business policy from the cached settings"""
    return get_settings().policy
