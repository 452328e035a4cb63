"""Credential metadata list anchoring."""

import logging
from typing import TYPE_CHECKING

from velocity_issuing.credentials.jsonld import iso_now
from velocity_issuing.crypto import KeyAlgorithm, hex_from_jwk
from velocity_issuing.jwt_vc import json_ld_to_unsigned_vc_jwt_content
from velocity_issuing.kms import call_with_kms_key
from velocity_issuing.ledger.base import AlgType, LedgerError, MetadataRegistry
from velocity_issuing.models import CredentialMetadata, Issuer
from velocity_issuing.urls import build_issuer_vc_url

if TYPE_CHECKING:
    from velocity_issuing.context import IssuingContext

LOGGER = logging.getLogger(__name__)

METADATA_LIST_HEADER_TYPE = "CredentialMetadataListHeader"


class CredentialMetadataContract:
    """Metadata list operations on behalf of an issuer."""

    alg_type = AlgType.JWK_BASE64_AES_256

    def __init__(
        self,
        registry: MetadataRegistry,
        issuer: Issuer,
        context: "IssuingContext",
    ):
        """Init the contract."""
        self.registry = registry
        self.issuer = issuer
        self.context = context

    async def issuer_vc(self, list_id: int) -> str:
        """Attestation that the issuer owns a metadata list."""
        issuer = self.issuer
        header, payload = json_ld_to_unsigned_vc_jwt_content(
            {
                "id": build_issuer_vc_url(
                    list_id,
                    issuer,
                    self.context.config.metadata_registry_contract_address,
                ),
                "type": [METADATA_LIST_HEADER_TYPE],
                "issuer": issuer.did,
                "issuanceDate": iso_now(),
                "credentialSubject": {
                    "listId": list_id,
                    "accountId": issuer.dlt_primary_address,
                },
            },
            KeyAlgorithm.SECP256K1,
            issuer.issuing_service_did_key_id,
        )
        return await self.context.kms.sign_jwt(
            payload, issuer.issuing_service_kms_key_id, header
        )

    async def create_list(self, list_id: int) -> bool:
        """Create a metadata list.

        Returns:
            True if the list was created, False if it already existed
        """
        created = await self.registry.create_credential_metadata_list(
            self.issuer.dlt_primary_address,
            list_id,
            await self.issuer_vc(list_id),
            self.context.cao_did,
            self.alg_type,
        )
        LOGGER.info("Created metadata list %s (created=%s)", list_id, created)
        return created

    async def add_entry(self, metadata: CredentialMetadata) -> bool:
        """Anchor a credential's metadata, keyed by its content hash."""
        added = await self.registry.add_credential_metadata_entry(
            metadata.model_dump(by_alias=True),
            metadata.content_hash,
            self.context.cao_did,
            self.alg_type,
        )
        LOGGER.debug(
            "Added metadata entry %s:%s", metadata.list_id, metadata.index
        )
        return added


async def init_credential_metadata_contract(
    issuer: Issuer, context: "IssuingContext"
) -> CredentialMetadataContract:
    """Metadata contract signing ledger writes with the issuer's operator key."""
    if issuer.dlt_operator_kms_key_id is None:
        raise LedgerError(f"Issuer {issuer.id} has no operator key")

    registry = await call_with_kms_key(
        context.kms,
        issuer.dlt_operator_kms_key_id,
        lambda jwk: context.registries.metadata_registry(
            hex_from_jwk(jwk), context.config.metadata_registry_contract_address
        ),
    )
    return CredentialMetadataContract(registry, issuer, context)
