"""Assemble unsigned JSON-LD credentials from offers."""

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Mapping

from velocity_issuing.config import IssuingConfig
from velocity_issuing.did import to_relative_service_id
from velocity_issuing.models import CredentialTypeMetadata, Issuer, VelocityOffer

VC_CONTEXT = "https://www.w3.org/2018/credentials/v1"
VERIFIABLE_CREDENTIAL = "VerifiableCredential"
LAYER_1_CREDENTIAL = "VelocityNetworkLayer1Credential"
LAYER_2_CREDENTIAL = "VelocityNetworkLayer2Credential"
REVOCATION_LIST_TYPE = "VelocityRevocationListJan2021"
REFRESH_SERVICE_TYPE = "VelocityNetworkRefreshService2024"
CONTENT_HASH_TYPE = "VelocityContentHash2020"
DEFAULT_SCHEMA_TYPE = "JsonSchemaValidator2018"

VNF_PROTOCOL_VERSION_1 = 1
VNF_PROTOCOL_VERSION_2 = 2

# Bookkeeping fields and fields that are placed explicitly
OMITTED_OFFER_FIELDS = frozenset(
    (
        "_id",
        "exchangeId",
        "offerId",
        "offerCreationDate",
        "offerExpirationDate",
        "createdAt",
        "updatedAt",
        "linkedCredentials",
        "consentedAt",
        "rejectedAt",
        "type",
        "@context",
        "credentialSubject",
        "id",
        "issuer",
    )
)


def cast_array(value: Any) -> List[Any]:
    """Wrap a single value in a list; None becomes an empty list."""
    if value is None:
        return []
    if isinstance(value, list):
        return list(value)
    return [value]


def uniq(values: Iterable[Any]) -> List[Any]:
    """Drop duplicates, keeping the first occurrence."""
    result = []
    for value in values:
        if value not in result:
            result.append(value)
    return result


def add_to_polymorphic_array(new_value: Any, existing: Any) -> Any:
    """Append to an existing value or list of values, or return new_value."""
    if existing is None:
        return new_value
    return [*cast_array(existing), new_value]


def extract_credential_type(offer: VelocityOffer) -> str | None:
    """Credential type declared by an offer."""
    for value in cast_array(offer.get("type")):
        if value not in (VERIFIABLE_CREDENTIAL, LAYER_1_CREDENTIAL, LAYER_2_CREDENTIAL):
            return value
    return None


def clean_offer(offer: VelocityOffer) -> Dict[str, Any]:
    """Offer without bookkeeping fields."""
    return {
        key: value for key, value in offer.items() if key not in OMITTED_OFFER_FIELDS
    }


def build_contexts(
    offer: VelocityOffer,
    credential_type_metadata: CredentialTypeMetadata,
    config: IssuingConfig,
) -> List[str]:
    """Union of the base, type, offer and extension contexts."""
    return uniq(
        value
        for value in (
            VC_CONTEXT,
            *cast_array(credential_type_metadata.jsonld_context),
            *cast_array(offer.get("@context")),
            config.credential_extensions_context_url,
        )
        if value is not None
    )


def build_issuer(issuer: Issuer, offer: VelocityOffer) -> Dict[str, Any]:
    """Issuer object, keeping any offered issuer details.

    The tenant DID always replaces an offered issuer id, so credentials cannot
    claim another issuer.
    """
    offer_issuer = offer.get("issuer")
    if isinstance(offer_issuer, Mapping):
        details = {
            key: value
            for key, value in offer_issuer.items()
            if key not in ("id", "vendorOrganizationId")
        }
        return {"id": issuer.did, **details}
    return {"id": issuer.did}


def build_credential_subject(
    offer: VelocityOffer,
    credential_subject_id: str | None,
    contexts: List[str],
    config: IssuingConfig,
) -> Dict[str, Any]:
    """Credential subject without vendor user ids."""
    subject = {
        key: value
        for key, value in (offer.get("credentialSubject") or {}).items()
        if key != "vendorUserId"
    }
    if credential_subject_id:
        subject["id"] = credential_subject_id
    if config.credential_subject_context:
        subject["@context"] = contexts
    return subject


def build_credential_schema(
    offer: VelocityOffer, credential_type_metadata: CredentialTypeMetadata
) -> Any:
    """Offered schema, or the type's schema when the offer has none."""
    if offer.get("credentialSchema") is None:
        return {
            "type": DEFAULT_SCHEMA_TYPE,
            "id": credential_type_metadata.schema_url,
        }
    return offer["credentialSchema"]


def build_credential_status(offer: VelocityOffer, revocation_url: str) -> Any:
    """Credential status, adding the revocation list status to any existing."""
    return add_to_polymorphic_array(
        {"type": REVOCATION_LIST_TYPE, "id": revocation_url},
        offer.get("credentialStatus"),
    )


def build_refresh_service(issuer: Issuer, offer: VelocityOffer) -> Any:
    """Refresh service, adding the issuing service to any existing."""
    return add_to_polymorphic_array(
        {
            "type": REFRESH_SERVICE_TYPE,
            "id": f"{issuer.did}{to_relative_service_id(issuer.issuing_service_id)}",
        },
        offer.get("refreshService"),
    )


def iso_now() -> str:
    """Current time as ISO-8601 UTC with milliseconds."""
    return (
        datetime.now(timezone.utc)
        .isoformat(timespec="milliseconds")
        .replace("+00:00", "Z")
    )


def prepare_json_ld_credential(
    issuer: Issuer,
    credential_subject_id: str | None,
    offer: VelocityOffer,
    credential_id: str,
    content_hash: str,
    credential_type_metadata: CredentialTypeMetadata,
    revocation_url: str,
    config: IssuingConfig,
) -> Dict[str, Any]:
    """Prepare an unsigned JSON-LD credential from an offer."""
    layer = (
        LAYER_1_CREDENTIAL if credential_type_metadata.layer1 else LAYER_2_CREDENTIAL
    )
    contexts = build_contexts(offer, credential_type_metadata, config)

    return {
        "@context": contexts,
        "type": uniq([VERIFIABLE_CREDENTIAL, *cast_array(offer.get("type")), layer]),
        "id": credential_id,
        "issuer": build_issuer(issuer, offer),
        "credentialSubject": build_credential_subject(
            offer, credential_subject_id, contexts, config
        ),
        **clean_offer(offer),
        "issuanceDate": iso_now(),
        "credentialSchema": build_credential_schema(offer, credential_type_metadata),
        "credentialStatus": build_credential_status(offer, revocation_url),
        "refreshService": build_refresh_service(issuer, offer),
        "contentHash": {"type": CONTENT_HASH_TYPE, "value": content_hash},
        "vnfProtocolVersion": VNF_PROTOCOL_VERSION_2
        if credential_subject_id
        else VNF_PROTOCOL_VERSION_1,
    }
