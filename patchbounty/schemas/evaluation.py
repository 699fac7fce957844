"""
patchbounty - Evaluation Schemas
"""
from typing import Literal
from pydantic import BaseModel, Field

from patchbounty.core.evaluation.types import Submission


class SubmissionCreate(BaseModel):
    """Schema for a code-change submission to evaluate and settle"""
    title: str = Field(..., min_length=1, max_length=500, description="Change title (feat:/fix: prefixes are recognized)")
    author: str = Field(..., min_length=1, max_length=200, description="Author identifier")
    repo: str = Field(..., min_length=1, max_length=300, description="Origin repository, e.g. org/name")
    files_changed: int = Field(..., ge=0, description="Number of files changed")
    additions: int = Field(..., ge=0, description="Added line count")
    deletions: int = Field(..., ge=0, description="Removed line count")
    diff: str = Field(..., description="Raw unified diff text")
    payout_address: str = Field(..., min_length=1, max_length=200, description="Destination payout address")
    source: Literal["api", "simulation"] = Field("api", description="Where the submission came from")

    def to_submission(self) -> Submission:
        """Build the immutable core record; raises ValueError on blank fields."""
        return Submission(
            title=self.title,
            author=self.author,
            repo=self.repo,
            files_changed=self.files_changed,
            additions=self.additions,
            deletions=self.deletions,
            diff=self.diff,
            payout_address=self.payout_address,
        )
