"""Key generation, signing and hashing primitives.

Per-credential keys are generated through a ``KeyGenerator`` so callers can
swap the cryptography backend; the default backend is Askar.
"""

import hashlib
import json
from base64 import urlsafe_b64decode
from enum import Enum
from typing import Any, Awaitable, Callable, Mapping

from aries_askar import Key, KeyAlg
from eth_account import Account


class KeyAlgorithm(str, Enum):
    """Signature algorithms usable for credential keys."""

    SECP256K1 = "SECP256K1"
    P256 = "P-256"
    ED25519 = "Ed25519"

    @property
    def jose_alg(self) -> str:
        """JOSE ``alg`` header value for the algorithm."""
        return _JOSE_ALGS[self]

    @property
    def askar_alg(self) -> KeyAlg:
        """Askar key algorithm."""
        return _ASKAR_ALGS[self]


_JOSE_ALGS = {
    KeyAlgorithm.SECP256K1: "ES256K",
    KeyAlgorithm.P256: "ES256",
    KeyAlgorithm.ED25519: "EdDSA",
}

_ASKAR_ALGS = {
    KeyAlgorithm.SECP256K1: KeyAlg.K256,
    KeyAlgorithm.P256: KeyAlg.P256,
    KeyAlgorithm.ED25519: KeyAlg.ED25519,
}

DEFAULT_KEY_ALGORITHM = KeyAlgorithm.SECP256K1

Signer = Callable[[bytes], bytes | Awaitable[bytes]]


async def sign_message(sign: Signer, message: bytes) -> bytes:
    """Sign a message.

    The signer must either be a callable returning bytes or a callable returning
    an awaitable of bytes.
    """
    value = sign(message)
    if isinstance(value, bytes):
        return value

    return await value


class JwaKeyPair:
    """Key pair usable for JWS signing."""

    def __init__(self, algorithm: KeyAlgorithm, key: Key):
        """Init the key pair."""
        self.algorithm = algorithm
        self.key = key

    @property
    def public_jwk(self) -> dict[str, Any]:
        """Public key as a JWK."""
        return json.loads(self.key.get_jwk_public())

    @property
    def private_jwk(self) -> dict[str, Any]:
        """Private key as a JWK."""
        return json.loads(self.key.get_jwk_secret())

    def sign(self, message: bytes) -> bytes:
        """Sign a message with the private key."""
        return self.key.sign_message(message)

    def __repr__(self) -> str:
        """Format without key material."""
        return f"<{self.__class__.__name__} algorithm={self.algorithm.value}>"


KeyGenerator = Callable[[KeyAlgorithm], JwaKeyPair]


def generate_jwa_key_pair(
    algorithm: KeyAlgorithm = DEFAULT_KEY_ALGORITHM,
) -> JwaKeyPair:
    """Generate a fresh key pair for the algorithm."""
    algorithm = KeyAlgorithm(algorithm)
    return JwaKeyPair(algorithm, Key.generate(algorithm.askar_alg))


def key_from_jwk(jwk: Mapping[str, Any]) -> Key:
    """Load an askar key from a JWK."""
    return Key.from_jwk(json.dumps(dict(jwk)))


def hash_and_encode_hex(value: str | bytes) -> str:
    """Hex encoded sha256 digest."""
    if isinstance(value, str):
        value = value.encode("utf-8")
    return hashlib.sha256(value).hexdigest()


def get_2_bytes_hash(value: str) -> str:
    """Short fixed width hash used for compact ledger values."""
    return f"0x{hash_and_encode_hex(value)[:4]}"


def _b64url_decode(value: str) -> bytes:
    return urlsafe_b64decode(value + "=" * (-len(value) % 4))


def hex_from_jwk(jwk: Mapping[str, Any]) -> str:
    """Private scalar of an EC or OKP JWK as hex."""
    if "d" not in jwk:
        raise ValueError("JWK does not contain private key material")
    return _b64url_decode(jwk["d"]).hex()


def to_ethereum_address(private_jwk: Mapping[str, Any]) -> str:
    """Derive the ledger address for a secp256k1 private JWK."""
    if private_jwk.get("crv") != "secp256k1":
        raise ValueError("Ledger addresses can only be derived from secp256k1 keys")
    return Account.from_key(bytes.fromhex(hex_from_jwk(private_jwk))).address
