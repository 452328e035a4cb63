"""Ledger anchoring."""

from velocity_issuing.ledger.base import (
    AlgType,
    LedgerError,
    MetadataRegistry,
    RegistryProvider,
    RevocationRegistry,
    WalletNotRegisteredError,
)
from velocity_issuing.ledger.metadata import (
    CredentialMetadataContract,
    init_credential_metadata_contract,
)
from velocity_issuing.ledger.revocation import (
    create_revocation_list,
    init_revocation_registry,
)

__all__ = [
    "AlgType",
    "CredentialMetadataContract",
    "LedgerError",
    "MetadataRegistry",
    "RegistryProvider",
    "RevocationRegistry",
    "WalletNotRegisteredError",
    "create_revocation_list",
    "init_credential_metadata_contract",
    "init_revocation_registry",
]
