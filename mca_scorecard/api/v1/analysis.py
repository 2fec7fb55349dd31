"""POST /v1/analysis - MCA scorecard for a deal's bank transactions"""

import time
import logging
from fastapi import APIRouter, Depends, HTTPException, Request

from mca_scorecard.api.v1.schemas import (
    AggregatedMetricsSchema,
    AnalysisRequest,
    AnalysisResponse,
    ScorecardSchema,
)
from mca_scorecard.api.dependencies import get_red_flag_thresholds, get_request_id, get_scoring_weights
from mca_scorecard.domain.exceptions import EmptyInputError, IncompleteMetricsError, InvalidTransactionError
from mca_scorecard.domain.models import RedFlagThresholds, ScoringWeights
from mca_scorecard.domain.scorecard import analyze_deal, to_deal_metrics
from mca_scorecard.infrastructure.observability.metrics import record_analysis, analysis_failures_counter
from mca_scorecard.infrastructure.observability.logging import log_analysis

router = APIRouter()


@router.post("/analysis", response_model=AnalysisResponse)
def create_analysis(
    request_body: AnalysisRequest,
    request: Request,
    default_weights: ScoringWeights = Depends(get_scoring_weights),
    thresholds: RedFlagThresholds = Depends(get_red_flag_thresholds),
):
    """
    Compute aggregated metrics and the underwriting scorecard for a deal.

    Flow:
    1. Validate and normalize the supplied transactions
    2. Aggregate monthly and category metrics, detect red flags
    3. Score the four sections and compose the scorecard
    4. Return metrics, scorecard and the flat deal-metrics record
    """
    start_time = time.time()
    request_id = get_request_id(request)
    weights = (
        ScoringWeights(**request_body.weights.model_dump())
        if request_body.weights is not None
        else default_weights
    )

    try:
        analysis = analyze_deal(
            [txn.model_dump() for txn in request_body.transactions],
            weights=weights,
            thresholds=thresholds,
        )

    except EmptyInputError as e:
        analysis_failures_counter.labels(reason="no_data").inc()
        logging.warning(f"No data: {e}", extra={"request_id": request_id, "deal_id": request_body.deal_id})
        raise HTTPException(status_code=422, detail={"code": "no_data", "message": str(e)})

    except InvalidTransactionError as e:
        analysis_failures_counter.labels(reason="invalid_transaction").inc()
        logging.warning(f"Invalid transaction: {e}", extra={"request_id": request_id, "deal_id": request_body.deal_id})
        raise HTTPException(
            status_code=422,
            detail={"code": "invalid_transaction", "message": str(e), "transaction_id": e.transaction_id},
        )

    except IncompleteMetricsError as e:
        analysis_failures_counter.labels(reason="incomplete_metrics").inc()
        logging.warning(f"Incomplete metrics: {e}", extra={"request_id": request_id, "deal_id": request_body.deal_id})
        raise HTTPException(
            status_code=422,
            detail={"code": "incomplete_metrics", "message": str(e), "section": e.section},
        )

    except Exception as e:
        analysis_failures_counter.labels(reason="error").inc()
        logging.error(f"Unexpected error: {e}", extra={"request_id": request_id, "deal_id": request_body.deal_id})
        raise HTTPException(status_code=500, detail="Internal server error")

    scorecard = analysis.scorecard
    duration_ms = (time.time() - start_time) * 1000
    record_analysis(scorecard.verdict.value, scorecard.risk_tier.value, scorecard.red_flags)
    log_analysis(
        request_id,
        request_body.deal_id,
        len(request_body.transactions),
        scorecard.overall_score,
        scorecard.risk_tier.value,
        scorecard.verdict.value,
        len(scorecard.red_flags),
        duration_ms,
    )

    return AnalysisResponse(
        deal_id=request_body.deal_id,
        metrics=AggregatedMetricsSchema.model_validate(analysis.metrics),
        scorecard=ScorecardSchema.model_validate(scorecard),
        deal_metrics=to_deal_metrics(analysis.metrics, scorecard),
    )
