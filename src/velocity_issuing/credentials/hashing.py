"""Offer content hashing."""

import json
from typing import Any, Mapping

from velocity_issuing.crypto import hash_and_encode_hex

HASHED_OFFER_FIELDS = ("credentialSubject", "validFrom", "validUntil", "expirationDate")


def canonicalize(value: Any) -> str:
    """Serialize to JSON independently of key order."""
    return json.dumps(
        value, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    )


def hash_offer(offer: Mapping[str, Any]) -> str:
    """Digest of the subject and validity fields of an offer."""
    content = {
        name: offer[name] for name in HASHED_OFFER_FIELDS if offer.get(name) is not None
    }
    return hash_and_encode_hex(canonicalize(content))
