"""Issue ledger anchored Velocity verifiable credentials."""

from velocity_issuing.context import IssuingContext
from velocity_issuing.issuing import (
    anchor_velocity_verifiable_credentials,
    issue_velocity_verifiable_credentials,
    prepare_velocity_verifiable_credentials,
)

__all__ = [
    "IssuingContext",
    "anchor_velocity_verifiable_credentials",
    "issue_velocity_verifiable_credentials",
    "prepare_velocity_verifiable_credentials",
]
