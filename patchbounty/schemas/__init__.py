from patchbounty.schemas.evaluation import SubmissionCreate
from patchbounty.schemas.contract_audit import ContractAuditCreate

__all__ = ["SubmissionCreate", "ContractAuditCreate"]
