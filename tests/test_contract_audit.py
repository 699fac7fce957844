"""
Tests for paid contract audits (the treasury's revenue side).
"""

import json
from decimal import Decimal

import pytest

from patchbounty.core.contract_audit import (
    LARGE_CONTRACT_LOC,
    MAX_FINDINGS,
    AuditVerdict,
    ContractAuditor,
    ContractAuditRequest,
    Severity,
    heuristic_audit,
)
from patchbounty.core.treasury import TreasuryLedger

SECURE_CONTRACT = """
import "@openzeppelin/contracts/access/Ownable.sol";
import "@openzeppelin/contracts/security/ReentrancyGuard.sol";
contract Vault is Ownable, ReentrancyGuard {
    event Withdrawn(address to, uint256 amount);
    function withdraw(uint256 amount) external onlyOwner nonReentrant {
        require(amount > 0, "zero");
        emit Withdrawn(msg.sender, amount);
    }
}
"""

LOW_LEVEL_CALL_CONTRACT = SECURE_CONTRACT.replace(
    'require(amount > 0, "zero");',
    '(bool ok, ) = msg.sender.call{value: amount}("");',
)

UNGUARDED_CONTRACT = """
contract Bank {
    mapping(address => uint256) balances;
    function withdraw() external {
        msg.sender.call{value: balances[msg.sender]}("");
        balances[msg.sender] = 0;
    }
}
"""


def _request(source=SECURE_CONTRACT, price="10.00", **kwargs):
    fields = dict(client="Acme DeFi", contract_name="Vault.sol", source=source, price=Decimal(price))
    fields.update(kwargs)
    return ContractAuditRequest(**fields)


# ===================================================================
# Heuristic review
# ===================================================================

class TestHeuristicAudit:

    def test_secure_contract(self):
        verdict, severity, summary, findings = heuristic_audit(_request())
        assert verdict == AuditVerdict.SECURE
        assert severity == Severity.LOW
        assert summary.startswith("Vault.sol passes security review")
        assert "Access control implemented via Ownable" in findings

    def test_low_level_call_is_issues_found(self):
        verdict, severity, _, findings = heuristic_audit(_request(LOW_LEVEL_CALL_CONTRACT))
        assert verdict == AuditVerdict.ISSUES_FOUND
        assert severity == Severity.MEDIUM
        assert any(".call()" in f for f in findings)

    def test_unguarded_contract_is_critical(self):
        verdict, severity, summary, findings = heuristic_audit(_request(UNGUARDED_CONTRACT, contract_name="Bank.sol"))
        assert verdict == AuditVerdict.CRITICAL
        assert severity == Severity.HIGH
        assert "Do not deploy" in summary
        assert findings[0].startswith("No ReentrancyGuard")

    def test_large_contract_flagged(self):
        _, _, _, findings = heuristic_audit(_request(UNGUARDED_CONTRACT, lines_of_code=LARGE_CONTRACT_LOC + 1))
        assert any("LOC" in f for f in findings)

    def test_findings_capped(self):
        _, _, _, findings = heuristic_audit(_request(SECURE_CONTRACT + "\nPausable .transfer(", lines_of_code=900))
        assert len(findings) == MAX_FINDINGS


class TestRequestValidation:

    @pytest.mark.parametrize("price", ["0", "-5", "NaN"])
    def test_invalid_price(self, price):
        with pytest.raises(ValueError):
            _request(price=price)

    @pytest.mark.parametrize("price", ["0.001", "0.004"])
    def test_sub_cent_price_rejected(self, price):
        with pytest.raises(ValueError, match="at least one cent"):
            _request(price=price)

    @pytest.mark.asyncio
    async def test_half_cent_price_rounds_up(self):
        ledger = TreasuryLedger(500, 50)
        report = await ContractAuditor(ledger).audit(_request(price="0.005"))
        assert report.amount_charged == Decimal("0.01")
        assert ledger.snapshot().total_earned == Decimal("0.01")

    def test_blank_client(self):
        with pytest.raises(ValueError, match="client"):
            _request(client="  ")

    def test_loc_defaults_to_source_lines(self):
        assert _request().loc == len(SECURE_CONTRACT.splitlines())


# ===================================================================
# Auditor
# ===================================================================

class TestContractAuditor:

    @pytest.mark.asyncio
    async def test_audit_records_revenue(self):
        ledger = TreasuryLedger(500, 50)
        auditor = ContractAuditor(ledger)
        report = await auditor.audit(_request(price="10.00"))

        assert report.id.startswith("audit-")
        assert report.tier == "heuristic"
        assert report.amount_charged == Decimal("10.00")
        state = ledger.snapshot()
        assert state.total_earned == Decimal("10.00")
        assert state.audit_count == 1
        assert state.net_balance == Decimal("510.00")
        assert auditor.list_audits()[0]["id"] == report.id

    @pytest.mark.asyncio
    async def test_remote_tier_used_when_valid(self, scripted_provider):
        provider = scripted_provider(
            "bedrock",
            text=json.dumps({
                "verdict": "ISSUES_FOUND",
                "severity": "medium",
                "summary": "Unchecked call return.",
                "findings": ["Check the call result"],
            }),
        )
        report = await ContractAuditor(TreasuryLedger(500, 50), provider, "m").audit(_request())
        assert report.tier == "bedrock"
        assert report.verdict == AuditVerdict.ISSUES_FOUND
        assert report.summary == "[bedrock] Unchecked call return."

    @pytest.mark.asyncio
    async def test_invalid_remote_falls_back(self, scripted_provider):
        provider = scripted_provider("bedrock", text=json.dumps({"verdict": "FINE", "severity": "low"}))
        ledger = TreasuryLedger(500, 50)
        report = await ContractAuditor(ledger, provider, "m").audit(_request(UNGUARDED_CONTRACT))
        assert report.tier == "heuristic"
        assert report.verdict == AuditVerdict.CRITICAL
        assert ledger.snapshot().total_earned == Decimal("10.00")

    @pytest.mark.asyncio
    async def test_remote_error_falls_back(self, scripted_provider):
        provider = scripted_provider("anthropic", error=RuntimeError("throttled"))
        report = await ContractAuditor(TreasuryLedger(500, 50), provider, "m").audit(_request())
        assert report.tier == "heuristic"
        assert provider.calls == 1

    @pytest.mark.asyncio
    async def test_revenue_funds_bounties(self):
        ledger = TreasuryLedger("1.00", 50)
        assert not ledger.authorize_payout("5.00").authorized
        await ContractAuditor(ledger).audit(_request(price="10.00"))
        assert ledger.authorize_payout("5.00").authorized
