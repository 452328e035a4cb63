"""Ledger client interfaces.

Contract clients are supplied by a ``RegistryProvider``; the issuing pipeline
never talks to a chain directly.
"""

from enum import Enum
from typing import Any, Mapping, Protocol


class AlgType(str, Enum):
    """Encryption scheme of an anchored metadata entry."""

    HEX_AES_256 = "hex-aes-256"
    COSEKEY_AES_256 = "cosekey-aes-256"
    JWK_BASE64_AES_256 = "jwk-base64-aes-256"


class LedgerError(Exception):
    """Raised on ledger errors."""


class WalletNotRegisteredError(LedgerError):
    """Raised when the operator wallet is unknown to the revocation registry."""


class RevocationRegistry(Protocol):
    """Revocation list contract client."""

    async def add_revocation_list_signed(self, list_id: int, cao_did: str) -> Any:
        """Register a revocation list.

        Raises:
            WalletNotRegisteredError: the operator wallet is not registered
        """
        ...

    async def add_wallet_to_registry_signed(self, cao_did: str) -> Any:
        """Register the operator wallet."""
        ...


class MetadataRegistry(Protocol):
    """Credential metadata list contract client."""

    async def create_credential_metadata_list(
        self,
        account_id: str,
        list_id: int,
        issuer_vc: str,
        cao_did: str,
        alg_type: AlgType,
    ) -> bool:
        """Create a metadata list, returning False if it already existed."""
        ...

    async def add_credential_metadata_entry(
        self,
        metadata: Mapping[str, Any],
        password: str,
        cao_did: str,
        alg_type: AlgType,
    ) -> bool:
        """Anchor a credential metadata entry."""
        ...


class RegistryProvider(Protocol):
    """Factory of contract clients bound to an operator key."""

    async def revocation_registry(
        self, private_key: str, contract_address: str
    ) -> RevocationRegistry:
        """Revocation registry client signing with private_key (hex)."""
        ...

    async def metadata_registry(
        self, private_key: str, contract_address: str
    ) -> MetadataRegistry:
        """Metadata registry client signing with private_key (hex)."""
        ...
