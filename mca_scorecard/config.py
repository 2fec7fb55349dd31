"""Configuration management using Pydantic Settings"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from mca_scorecard.domain.models import RedFlagThresholds, ScoringWeights


class Settings(BaseSettings):
    """Application configuration loaded from environment variables"""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Service
    service_name: str = "mca-scorecard"
    log_level: str = "INFO"

    # Overall score weights (relative, normalized by their sum)
    weight_revenue_quality: float = Field(0.25, ge=0)
    weight_expense_quality: float = Field(0.25, ge=0)
    weight_existing_debt: float = Field(0.25, ge=0)
    weight_cashflow_charges: float = Field(0.25, ge=0)

    # Red flag thresholds
    red_flag_nsf_count_max: int = 5
    red_flag_negative_days_max: int = 10
    red_flag_debt_to_revenue_max: float = 0.30
    red_flag_revenue_decline_max: float = 0.20  # decline, as a positive fraction
    red_flag_owner_draw_max: float = 0.25

    def scoring_weights(self) -> ScoringWeights:
        return ScoringWeights(
            revenue_quality=self.weight_revenue_quality,
            expense_quality=self.weight_expense_quality,
            existing_debt_impact=self.weight_existing_debt,
            cashflow_charges=self.weight_cashflow_charges,
        )

    def red_flag_thresholds(self) -> RedFlagThresholds:
        return RedFlagThresholds(
            nsf_count_max=self.red_flag_nsf_count_max,
            negative_days_max=self.red_flag_negative_days_max,
            debt_to_revenue_max=self.red_flag_debt_to_revenue_max,
            revenue_decline_max=self.red_flag_revenue_decline_max,
            owner_draw_max=self.red_flag_owner_draw_max,
        )


settings = Settings()
