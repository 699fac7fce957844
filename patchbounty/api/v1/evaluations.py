"""
patchbounty - Evaluation API Endpoints
"""
import logging
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from patchbounty.core.settlement import SettlementOrchestrator
from patchbounty.db.database import get_db
from patchbounty.models import EvaluationRecord
from patchbounty.schemas import SubmissionCreate
from patchbounty.services import get_orchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("")
async def create_evaluation(
    payload: SubmissionCreate,
    db: AsyncSession = Depends(get_db),
    orchestrator: SettlementOrchestrator = Depends(get_orchestrator),
):
    """Evaluate a submission, settle its payout and persist the result"""
    try:
        submission = payload.to_submission()
    except ValueError as e:
        logger.warning(f"Rejected submission: {e}")
        raise HTTPException(status_code=422, detail=str(e))

    result = await orchestrator.settle(submission, source=payload.source)
    db.add(EvaluationRecord.from_result(result))

    return {
        "success": True,
        "evaluation": result.to_dict(),
        "treasury": orchestrator.get_treasury_state().to_dict(),
    }


@router.get("")
async def list_evaluations(orchestrator: SettlementOrchestrator = Depends(get_orchestrator)):
    """Most recent settled results (in-memory, newest first)"""
    return {
        "evaluations": orchestrator.list_results(),
        "stats": orchestrator.get_stats(),
    }


@router.get("/history")
async def evaluation_history(
    limit: int = Query(50, ge=1, le=500),
    verdict: Optional[str] = Query(None, pattern="^(PASS|FAIL)$"),
    db: AsyncSession = Depends(get_db),
):
    """Persisted evaluation rows, newest first"""
    query = select(EvaluationRecord).order_by(EvaluationRecord.created_at.desc()).limit(limit)
    if verdict:
        query = query.where(EvaluationRecord.verdict == verdict)
    result = await db.execute(query)
    records = result.scalars().all()
    return {"evaluations": [r.to_dict() for r in records], "total": len(records)}


@router.get("/{evaluation_id}")
async def get_evaluation(evaluation_id: str, db: AsyncSession = Depends(get_db)):
    """Get one persisted evaluation"""
    record = await db.get(EvaluationRecord, evaluation_id)
    if not record:
        raise HTTPException(status_code=404, detail="Evaluation not found")
    return record.to_dict()
