"""Issue Velocity verifiable credentials.

Issuing happens in two phases. Preparing allocates ledger list entries and
builds the signed credentials without touching the ledger; anchoring creates
any new ledger lists and records the credential metadata. A failure while
anchoring leaves already anchored entries in place.
"""

import asyncio
import logging
from typing import List, Mapping, Sequence

from velocity_issuing.allocation.allocator import allocate_list_entries
from velocity_issuing.context import IssuingContext
from velocity_issuing.credentials.builder import build_verifiable_credentials
from velocity_issuing.ledger.metadata import init_credential_metadata_contract
from velocity_issuing.ledger.revocation import (
    create_revocation_list,
    init_revocation_registry,
)
from velocity_issuing.models import (
    AllocationListEntry,
    CredentialTypeMetadata,
    Issuer,
    PreparedCredentials,
    VelocityOffer,
)

LOGGER = logging.getLogger(__name__)

REVOCATION_LIST_ENTITY = "revocationListAllocations"
METADATA_LIST_ENTITY = "metadataListAllocations"


def new_list_ids(entries: Sequence[AllocationListEntry]) -> List[int]:
    """Distinct ids of lists that were created during allocation."""
    return list(dict.fromkeys(entry.list_id for entry in entries if entry.is_new_list))


async def prepare_velocity_verifiable_credentials(
    offers: Sequence[VelocityOffer],
    credential_subject_id: str | None,
    credential_types_map: Mapping[str, CredentialTypeMetadata],
    issuer: Issuer,
    context: IssuingContext,
) -> PreparedCredentials:
    """Allocate ledger entries and build signed credentials for the offers."""
    config = context.config
    revocation_list_entries = await allocate_list_entries(
        len(offers),
        issuer,
        REVOCATION_LIST_ENTITY,
        config.revocation_list_size,
        context,
    )
    metadata_entries = await allocate_list_entries(
        len(offers),
        issuer,
        METADATA_LIST_ENTITY,
        config.metadata_list_size,
        context,
    )

    vcs = await build_verifiable_credentials(
        offers,
        credential_subject_id,
        issuer,
        metadata_entries,
        revocation_list_entries,
        credential_types_map,
        context,
    )
    LOGGER.debug("Prepared %d credentials for tenant %s", len(vcs), issuer.id)
    return PreparedCredentials(
        vcs=vcs, revocation_list_entries=revocation_list_entries
    )


async def anchor_velocity_verifiable_credentials(
    prepared: PreparedCredentials,
    issuer: Issuer,
    context: IssuingContext,
) -> List[str]:
    """Anchor prepared credentials on the ledger, returning their VC-JWTs."""
    revocation_list_ids = new_list_ids(prepared.revocation_list_entries)
    if revocation_list_ids:
        registry = await init_revocation_registry(issuer, context)
        await asyncio.gather(
            *(
                create_revocation_list(registry, list_id, context.cao_did)
                for list_id in revocation_list_ids
            )
        )

    metadata_contract = await init_credential_metadata_contract(issuer, context)
    await asyncio.gather(
        *(
            metadata_contract.create_list(list_id)
            for list_id in new_list_ids([vc.metadata for vc in prepared.vcs])
        )
    )
    await asyncio.gather(
        *(metadata_contract.add_entry(vc.metadata) for vc in prepared.vcs)
    )

    LOGGER.info("Anchored %d credentials for tenant %s", len(prepared.vcs), issuer.id)
    return [vc.vc_jwt for vc in prepared.vcs]


async def issue_velocity_verifiable_credentials(
    offers: Sequence[VelocityOffer],
    credential_subject_id: str | None,
    credential_types_map: Mapping[str, CredentialTypeMetadata],
    issuer: Issuer,
    context: IssuingContext,
) -> List[str]:
    """Prepare and anchor credentials for the offers, returning their VC-JWTs."""
    prepared = await prepare_velocity_verifiable_credentials(
        offers, credential_subject_id, credential_types_map, issuer, context
    )
    return await anchor_velocity_verifiable_credentials(prepared, issuer, context)
