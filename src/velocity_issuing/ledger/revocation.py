"""Revocation list anchoring."""

import logging
from typing import TYPE_CHECKING

from velocity_issuing.crypto import hex_from_jwk
from velocity_issuing.kms import call_with_kms_key
from velocity_issuing.ledger.base import (
    LedgerError,
    RevocationRegistry,
    WalletNotRegisteredError,
)
from velocity_issuing.models import Issuer

if TYPE_CHECKING:
    from velocity_issuing.context import IssuingContext

LOGGER = logging.getLogger(__name__)


async def init_revocation_registry(
    issuer: Issuer, context: "IssuingContext"
) -> RevocationRegistry:
    """Revocation registry client signing with the issuer's operator key."""
    if issuer.dlt_operator_kms_key_id is None:
        raise LedgerError(f"Issuer {issuer.id} has no operator key")

    return await call_with_kms_key(
        context.kms,
        issuer.dlt_operator_kms_key_id,
        lambda jwk: context.registries.revocation_registry(
            hex_from_jwk(jwk), context.config.revocation_contract_address
        ),
    )


async def create_revocation_list(
    registry: RevocationRegistry, list_id: int, cao_did: str
):
    """Register a revocation list, registering the operator wallet if needed."""
    try:
        result = await registry.add_revocation_list_signed(list_id, cao_did)
    except WalletNotRegisteredError:
        LOGGER.info("Operator wallet not registered, registering it for %s", cao_did)
        await registry.add_wallet_to_registry_signed(cao_did)
        result = await registry.add_revocation_list_signed(list_id, cao_did)

    LOGGER.info("Created revocation list %s", list_id)
    return result
