"""Verifiable credential building."""

from velocity_issuing.credentials.builder import (
    UnknownCredentialTypeError,
    build_verifiable_credential,
    build_verifiable_credentials,
)
from velocity_issuing.credentials.hashing import hash_offer
from velocity_issuing.credentials.jsonld import (
    extract_credential_type,
    prepare_json_ld_credential,
)

__all__ = [
    "UnknownCredentialTypeError",
    "build_verifiable_credential",
    "build_verifiable_credentials",
    "extract_credential_type",
    "hash_offer",
    "prepare_json_ld_credential",
]
