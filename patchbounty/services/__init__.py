from patchbounty.services.settlement_service import (
    build_pipeline,
    configure_services,
    get_auditor,
    get_ledger,
    get_orchestrator,
)

__all__ = ["build_pipeline", "configure_services", "get_auditor", "get_ledger", "get_orchestrator"]
