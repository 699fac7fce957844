"""
patchbounty - Treasury API Endpoints
"""
from fastapi import APIRouter, Depends

from patchbounty.core.settlement import SettlementOrchestrator
from patchbounty.services import get_orchestrator

router = APIRouter()


@router.get("")
async def get_treasury(orchestrator: SettlementOrchestrator = Depends(get_orchestrator)):
    """Current ledger snapshot"""
    return orchestrator.get_treasury_state().to_dict()


@router.get("/stats")
async def get_treasury_stats(orchestrator: SettlementOrchestrator = Depends(get_orchestrator)):
    """Aggregate evaluation stats alongside the ledger"""
    return {
        "stats": orchestrator.get_stats(),
        "treasury": orchestrator.get_treasury_state().to_dict(),
    }
