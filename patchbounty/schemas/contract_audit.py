"""
patchbounty - Contract Audit Schemas
"""
from decimal import Decimal
from typing import Optional
from pydantic import BaseModel, Field

from patchbounty.core.contract_audit import ContractAuditRequest


class ContractAuditCreate(BaseModel):
    """Schema for a paid contract audit request"""
    client: str = Field(..., min_length=1, max_length=200, description="Paying client name")
    contract_name: str = Field(..., min_length=1, max_length=300, description="Contract file name, e.g. Vault.sol")
    source: str = Field(..., min_length=1, description="Contract source code")
    price: Decimal = Field(..., gt=0, max_digits=12, decimal_places=2, description="Price charged for the audit")
    lines_of_code: Optional[int] = Field(None, ge=0, description="Line count; derived from source when omitted")

    def to_request(self) -> ContractAuditRequest:
        return ContractAuditRequest(
            client=self.client,
            contract_name=self.contract_name,
            source=self.source,
            price=self.price,
            lines_of_code=self.lines_of_code,
        )
