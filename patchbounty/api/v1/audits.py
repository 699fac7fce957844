"""
patchbounty - Contract Audit API Endpoints

Paid audits are the treasury's revenue side.
"""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.ext.asyncio import AsyncSession

from patchbounty.core.contract_audit import ContractAuditor
from patchbounty.db.database import get_db
from patchbounty.models import ContractAuditRecord
from patchbounty.schemas import ContractAuditCreate
from patchbounty.services import get_auditor

router = APIRouter()


@router.post("")
async def create_audit(
    payload: ContractAuditCreate,
    db: AsyncSession = Depends(get_db),
    auditor: ContractAuditor = Depends(get_auditor),
):
    """Run a contract audit and record its price as revenue"""
    try:
        request = payload.to_request()
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    report = await auditor.audit(request)
    db.add(ContractAuditRecord.from_report(report))

    return {
        "success": True,
        "audit": report.to_dict(),
        "amount_charged": str(report.amount_charged),
        "treasury": auditor.ledger.snapshot().to_dict(),
    }


@router.get("")
async def list_audits(auditor: ContractAuditor = Depends(get_auditor)):
    """Recent contract audits, newest first"""
    return {"audits": auditor.list_audits()}
