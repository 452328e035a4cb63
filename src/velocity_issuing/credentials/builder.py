"""Build signed verifiable credentials from offers and allocated entries."""

import asyncio
import logging
from typing import TYPE_CHECKING, Mapping, Sequence

from velocity_issuing.allocation.queries import get_operator_address
from velocity_issuing.credentials.hashing import hash_offer
from velocity_issuing.credentials.jsonld import (
    extract_credential_type,
    prepare_json_ld_credential,
)
from velocity_issuing.crypto import DEFAULT_KEY_ALGORITHM, get_2_bytes_hash
from velocity_issuing.did import build_credential_did
from velocity_issuing.jwt_vc import json_ld_to_unsigned_vc_jwt_content, sign_jwt
from velocity_issuing.models import (
    AllocationListEntry,
    BuiltCredential,
    CredentialMetadata,
    CredentialTypeMetadata,
    Issuer,
    VelocityOffer,
)
from velocity_issuing.urls import build_revocation_url

if TYPE_CHECKING:
    from velocity_issuing.context import IssuingContext

LOGGER = logging.getLogger(__name__)


class UnknownCredentialTypeError(Exception):
    """Raised when an offer's credential type has no registered metadata."""

    def __init__(self, credential_type: str | None):
        """Init exception."""
        super().__init__(f"Unknown credential type {credential_type}")
        self.credential_type = credential_type


def lookup_credential_type(
    offer: VelocityOffer,
    credential_types_map: Mapping[str, CredentialTypeMetadata],
) -> tuple[str, CredentialTypeMetadata]:
    """Find the type of an offer and its metadata."""
    credential_type = extract_credential_type(offer)
    if credential_type is None or credential_type not in credential_types_map:
        raise UnknownCredentialTypeError(credential_type)
    return credential_type, credential_types_map[credential_type]


async def build_verifiable_credential(
    offer: VelocityOffer,
    credential_subject_id: str | None,
    issuer: Issuer,
    metadata_entry: AllocationListEntry,
    revocation_list_entry: AllocationListEntry,
    credential_types_map: Mapping[str, CredentialTypeMetadata],
    operator_address: str,
    context: "IssuingContext",
) -> BuiltCredential:
    """Build and sign a single credential with a fresh key."""
    config = context.config
    credential_type, type_metadata = lookup_credential_type(
        offer, credential_types_map
    )
    algorithm = type_metadata.default_signature_algorithm or DEFAULT_KEY_ALGORITHM
    key_pair = context.key_generator(algorithm)

    content_hash = hash_offer(offer)
    metadata = CredentialMetadata(
        list_id=metadata_entry.list_id,
        index=metadata_entry.index,
        is_new_list=metadata_entry.is_new_list,
        credential_type=credential_type,
        credential_type_encoded=get_2_bytes_hash(credential_type),
        content_hash=content_hash,
        public_key=key_pair.public_jwk,
    )

    credential_id = build_credential_did(
        metadata_entry,
        issuer,
        content_hash if config.credential_id_content_hash_suffix else None,
    )
    revocation_url = build_revocation_url(
        revocation_list_entry, operator_address, config.revocation_contract_address
    )
    json_ld_credential = prepare_json_ld_credential(
        issuer,
        credential_subject_id,
        offer,
        credential_id,
        content_hash,
        type_metadata,
        revocation_url,
        config,
    )

    header, payload = json_ld_to_unsigned_vc_jwt_content(
        json_ld_credential, key_pair.algorithm, f"{credential_id}#key-1"
    )
    vc_jwt = await sign_jwt(payload, header, key_pair.sign)
    LOGGER.debug("Built %s credential %s", credential_type, credential_id)

    return BuiltCredential(
        metadata=metadata, json_ld_credential=json_ld_credential, vc_jwt=vc_jwt
    )


async def build_verifiable_credentials(
    offers: Sequence[VelocityOffer],
    credential_subject_id: str | None,
    issuer: Issuer,
    metadata_entries: Sequence[AllocationListEntry],
    revocation_list_entries: Sequence[AllocationListEntry],
    credential_types_map: Mapping[str, CredentialTypeMetadata],
    context: "IssuingContext",
) -> list[BuiltCredential]:
    """Build the credentials for each offer, in offer order.

    Args:
        offers: the offers to build from
        credential_subject_id: optional subject id to bind into each credential
        issuer: the issuer
        metadata_entries: one metadata list entry per offer
        revocation_list_entries: one revocation list entry per offer
        credential_types_map: credential type metadata by type name
        context: the issuing context

    Raises:
        UnknownCredentialTypeError: an offer has an unregistered type
    """
    if not len(offers) == len(metadata_entries) == len(revocation_list_entries):
        raise ValueError("Each offer needs one metadata and one revocation entry")

    # Fail before anything is signed
    for offer in offers:
        lookup_credential_type(offer, credential_types_map)

    operator_address = await get_operator_address(issuer, context.kms)

    return list(
        await asyncio.gather(
            *(
                build_verifiable_credential(
                    offer,
                    credential_subject_id,
                    issuer,
                    metadata_entry,
                    revocation_list_entry,
                    credential_types_map,
                    operator_address,
                    context,
                )
                for offer, metadata_entry, revocation_list_entry in zip(
                    offers, metadata_entries, revocation_list_entries
                )
            )
        )
    )
