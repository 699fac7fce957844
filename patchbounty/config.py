"""
patchbounty - Configuration
"""
import os
from pathlib import Path
from typing import Dict, List, Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings"""

    # Application
    APP_NAME: str = "patchbounty"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Server
    HOST: str = "0.0.0.0"
    PORT: int = 8000

    # Database
    DATABASE_URL: str = "sqlite+aiosqlite:///./data/patchbounty.db"

    # Paths
    BASE_DIR: Path = Path(__file__).parent.parent
    DATA_DIR: Path = BASE_DIR / "data"

    # LLM Settings
    ANTHROPIC_API_KEY: Optional[str] = os.getenv("ANTHROPIC_API_KEY")
    OPENAI_API_KEY: Optional[str] = os.getenv("OPENAI_API_KEY")
    AWS_BEDROCK_REGION: str = "us-east-1"

    # Evaluator tiers, tried in order before the local heuristic
    EVALUATOR_TIERS: List[str] = ["anthropic", "bedrock"]
    EVALUATOR_MODELS: Dict[str, str] = {
        "anthropic": "claude-sonnet-4-5-20250929",
        "bedrock": "us.anthropic.claude-haiku-4-5-20251001-v1:0",
        "openai": "gpt-4o-mini",
    }
    EVALUATOR_TIMEOUT_SECONDS: float = 30.0
    EVALUATOR_MAX_TOKENS: int = 1024

    # Contract audits (revenue side); empty string = heuristic only
    CONTRACT_AUDIT_TIER: str = "bedrock"

    # Treasury
    MONTHLY_BUDGET: float = 500.0
    MAX_PAYOUT_PER_SUBMISSION: float = 50.0
    PAYOUT_CEILING: float = 50.0
    TREASURY_EPOCH: str = "Feb 2026"

    # Elevated audit subcontractor
    SUBCONTRACTOR_COST: float = 1.0
    SUBCONTRACTOR_ID: str = "security-oracle"
    SUBCONTRACTOR_ADDRESS: str = "0x742d35Cc6634C0532925a3b844Bc9e7595f2bD28"

    # Payments
    PAYMENT_SERVICE_URL: Optional[str] = None
    PAYMENT_SERVICE_TOKEN: Optional[str] = None
    PAYOUT_TOKEN: str = "USDC"
    PAYOUT_COMMIT_POLICY: str = "optimistic"  # optimistic | confirmed

    # CORS
    CORS_ORIGINS: list = ["http://localhost:3000", "http://127.0.0.1:3000"]

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()

# Ensure directories exist
settings.DATA_DIR.mkdir(parents=True, exist_ok=True)
