"""Dependency injection for FastAPI endpoints"""

from fastapi import Request

from mca_scorecard.config import settings
from mca_scorecard.domain.models import RedFlagThresholds, ScoringWeights


def get_request_id(request: Request) -> str:
    """Extract request ID from request state"""
    return getattr(request.state, "request_id", "unknown")


def get_scoring_weights() -> ScoringWeights:
    """Deployment-wide section weights; a request may override them"""
    return settings.scoring_weights()


def get_red_flag_thresholds() -> RedFlagThresholds:
    return settings.red_flag_thresholds()
