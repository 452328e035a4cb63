"""Key management.

The issuing pipeline only depends on the ``KMS`` protocol. ``AskarKMS`` is a
store backed implementation suitable for single node deployments and tests.
"""

import inspect
import logging
from typing import Any, Awaitable, Callable, Dict, Mapping, Protocol, TypeVar, cast
from uuid import uuid4

from aries_askar import Key, Store

from velocity_issuing.crypto import (
    DEFAULT_KEY_ALGORITHM,
    JwaKeyPair,
    KeyAlgorithm,
    generate_jwa_key_pair,
    key_from_jwk,
)
from velocity_issuing.jwt_vc import sign_jwt

LOGGER = logging.getLogger(__name__)

T = TypeVar("T")


class KMSError(Exception):
    """Raised on key management errors."""


class KeyNotFoundError(KMSError):
    """Raised when no key exists for an id."""


class KMS(Protocol):
    """Key management service protocol."""

    async def export_key_or_secret(self, key_id: str) -> Dict[str, Any]:
        """Export a key as ``{"keyId": ..., "privateJwk": ...}``."""
        ...

    async def sign_jwt(
        self, payload: Mapping[str, Any], key_id: str, header: Mapping[str, Any]
    ) -> str:
        """Sign a JWT with the key identified by key_id."""
        ...


class AskarKMS(KMS):
    """KMS keeping keys in an askar store."""

    def __init__(self, store: Store):
        """Init the kms."""
        self.store = store

    async def create_key(
        self,
        algorithm: KeyAlgorithm = DEFAULT_KEY_ALGORITHM,
        key_id: str | None = None,
    ) -> str:
        """Generate and store a new key, returning its id."""
        key_id = key_id or str(uuid4())
        pair = generate_jwa_key_pair(algorithm)
        await self._insert(key_id, pair.key, pair.algorithm)
        return key_id

    async def import_key(self, jwk: Mapping[str, Any], key_id: str | None = None) -> str:
        """Store an existing private JWK, returning its id."""
        key_id = key_id or str(uuid4())
        key = key_from_jwk(jwk)
        algorithm = next(
            alg for alg in KeyAlgorithm if alg.askar_alg == key.algorithm
        )
        await self._insert(key_id, key, algorithm)
        return key_id

    async def _insert(self, key_id: str, key: Key, algorithm: KeyAlgorithm):
        async with self.store.session() as session:
            await session.insert_key(
                name=key_id, key=key, tags={"alg": algorithm.value}
            )
        LOGGER.debug("Stored key %s (%s)", key_id, algorithm.value)

    async def _fetch(self, key_id: str) -> JwaKeyPair:
        async with self.store.session() as session:
            entry = await session.fetch_key(key_id)
        if not entry:
            raise KeyNotFoundError(f"No key found for {key_id}")

        tags = cast(dict, entry.tags)
        return JwaKeyPair(KeyAlgorithm(tags["alg"]), cast(Key, entry.key))

    async def export_key_or_secret(self, key_id: str) -> Dict[str, Any]:
        """Export a key as ``{"keyId": ..., "privateJwk": ...}``."""
        pair = await self._fetch(key_id)
        return {"keyId": key_id, "privateJwk": pair.private_jwk}

    async def public_jwk(self, key_id: str) -> Dict[str, Any]:
        """Public JWK of a stored key."""
        pair = await self._fetch(key_id)
        return pair.public_jwk

    async def sign_jwt(
        self, payload: Mapping[str, Any], key_id: str, header: Mapping[str, Any]
    ) -> str:
        """Sign a JWT with the key identified by key_id."""
        pair = await self._fetch(key_id)
        header = {**header, "alg": pair.algorithm.jose_alg}
        return await sign_jwt(payload, header, pair.sign)


async def call_with_kms_key(
    kms: KMS,
    key_id: str,
    fn: Callable[[Dict[str, Any]], T | Awaitable[T]],
) -> T:
    """Export a key and call fn with its private JWK."""
    key = await kms.export_key_or_secret(key_id)
    result = fn(key["privateJwk"])
    if inspect.isawaitable(result):
        return await result
    return cast(T, result)
