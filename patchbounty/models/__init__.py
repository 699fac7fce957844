from patchbounty.models.evaluation import EvaluationRecord
from patchbounty.models.contract_audit import ContractAuditRecord

__all__ = [
    "EvaluationRecord",
    "ContractAuditRecord",
]
