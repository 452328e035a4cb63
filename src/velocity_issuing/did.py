"""Credential DID building and parsing."""

from dataclasses import dataclass
from typing import List

from velocity_issuing.models import AllocationListEntry, Issuer

VELOCITY_V2_PREFIX = "did:velocity:v2:"
MULTI_TOKEN = ":multi:"


@dataclass
class VelocityCredentialLocator:
    """Location of a credential's metadata on the ledger."""

    account_id: str
    list_id: int
    index: int
    content_hash: str | None = None


def build_credential_did(
    entry: AllocationListEntry,
    issuer: Issuer,
    content_hash: str | None = None,
) -> str:
    """Build the DID identifying a credential by its metadata list entry."""
    did = (
        f"{VELOCITY_V2_PREFIX}{issuer.dlt_primary_address.lower()}"
        f":{entry.list_id}:{entry.index}"
    )
    if content_hash:
        did = f"{did}:{content_hash}"
    return did


def _parse_locator(value: str) -> VelocityCredentialLocator:
    parts = value.split(":")
    if len(parts) not in (3, 4):
        raise ValueError(f"Malformed credential locator {value}")
    account_id, list_id, index, *rest = parts
    return VelocityCredentialLocator(
        account_id=account_id,
        list_id=int(list_id),
        index=int(index),
        content_hash=rest[0] if rest else None,
    )


def parse_velocity_v2_did(did: str) -> List[VelocityCredentialLocator]:
    """Extract the ledger locations referenced by a did:velocity:v2."""
    if not did.startswith(VELOCITY_V2_PREFIX):
        raise ValueError(f"{did} is not a did:velocity:v2")

    if MULTI_TOKEN not in did:
        return [_parse_locator(did.removeprefix(VELOCITY_V2_PREFIX))]

    _, entries = did.split(MULTI_TOKEN, maxsplit=1)
    return [_parse_locator(entry) for entry in entries.split(";")]


def to_relative_service_id(service_id: str) -> str:
    """Reduce a service id to its fragment, e.g. ``did:ion:123#id-1`` to ``#id-1``."""
    _, sep, fragment = service_id.rpartition("#")
    if sep:
        return f"#{fragment}"
    return f"#{service_id}"
