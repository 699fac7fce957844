"""patchbounty - code-change evaluation and bounty settlement service."""

__version__ = "1.0.0"
