"""Issuing models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

from pydantic import AliasChoices, BaseModel, ConfigDict, Field

from velocity_issuing.crypto import KeyAlgorithm

VelocityOffer = Mapping[str, Any]


class Issuer(BaseModel):
    """Identity under which credentials are issued."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(validation_alias=AliasChoices("id", "tenantId", "tenant_id"))
    did: str
    dlt_primary_address: str = Field(
        validation_alias=AliasChoices("dltPrimaryAddress", "dlt_primary_address"),
        serialization_alias="dltPrimaryAddress",
    )
    dlt_operator_address: str | None = Field(
        default=None,
        validation_alias=AliasChoices("dltOperatorAddress", "dlt_operator_address"),
        serialization_alias="dltOperatorAddress",
    )
    dlt_operator_kms_key_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "dltOperatorKMSKeyId", "dlt_operator_kms_key_id"
        ),
        serialization_alias="dltOperatorKMSKeyId",
    )
    issuing_service_id: str = Field(
        validation_alias=AliasChoices("issuingServiceId", "issuing_service_id"),
        serialization_alias="issuingServiceId",
    )
    issuing_service_kms_key_id: str = Field(
        validation_alias=AliasChoices(
            "issuingServiceKMSKeyId", "issuing_service_kms_key_id"
        ),
        serialization_alias="issuingServiceKMSKeyId",
    )
    issuing_service_did_key_id: str = Field(
        validation_alias=AliasChoices(
            "issuingServiceDIDKeyId", "issuing_service_did_key_id"
        ),
        serialization_alias="issuingServiceDIDKeyId",
    )


class AllocationListEntry(BaseModel):
    """A slot allocated on a ledger list."""

    model_config = ConfigDict(populate_by_name=True)

    list_id: int = Field(
        validation_alias=AliasChoices("listId", "list_id"),
        serialization_alias="listId",
    )
    index: int
    is_new_list: bool = Field(
        validation_alias=AliasChoices("isNewList", "is_new_list"),
        serialization_alias="isNewList",
    )


class CredentialTypeMetadata(BaseModel):
    """Registered metadata of a credential type."""

    model_config = ConfigDict(populate_by_name=True)

    credential_type: str | None = Field(
        default=None,
        validation_alias=AliasChoices("credentialType", "credential_type"),
        serialization_alias="credentialType",
    )
    schema_url: str = Field(
        validation_alias=AliasChoices("schemaUrl", "schema_url"),
        serialization_alias="schemaUrl",
    )
    jsonld_context: str | List[str] | None = Field(
        default=None,
        validation_alias=AliasChoices("jsonldContext", "jsonld_context"),
        serialization_alias="jsonldContext",
    )
    layer1: bool = False
    default_signature_algorithm: KeyAlgorithm | None = Field(
        default=None,
        validation_alias=AliasChoices(
            "defaultSignatureAlgorithm", "default_signature_algorithm"
        ),
        serialization_alias="defaultSignatureAlgorithm",
    )


class CredentialMetadata(AllocationListEntry):
    """Per credential record anchored on the metadata list."""

    credential_type: str = Field(
        validation_alias=AliasChoices("credentialType", "credential_type"),
        serialization_alias="credentialType",
    )
    credential_type_encoded: str = Field(
        validation_alias=AliasChoices(
            "credentialTypeEncoded", "credential_type_encoded"
        ),
        serialization_alias="credentialTypeEncoded",
    )
    content_hash: str = Field(
        validation_alias=AliasChoices("contentHash", "content_hash"),
        serialization_alias="contentHash",
    )
    public_key: Dict[str, Any] = Field(
        validation_alias=AliasChoices("publicKey", "public_key"),
        serialization_alias="publicKey",
    )


@dataclass
class BuiltCredential:
    """A signed credential and the metadata to anchor for it."""

    metadata: CredentialMetadata
    json_ld_credential: Dict[str, Any]
    vc_jwt: str


@dataclass
class PreparedCredentials:
    """Result of the local phase of issuing."""

    vcs: List[BuiltCredential] = field(default_factory=list)
    revocation_list_entries: List[AllocationListEntry] = field(default_factory=list)
