"""VC-JWT encoding, signing and decoding.

JWT structure follows https://www.w3.org/TR/vc-data-model/#json-web-token.
"""

import json
from base64 import urlsafe_b64encode
from datetime import datetime
from typing import Any, Dict, Mapping, Tuple

import jwt

from velocity_issuing.crypto import KeyAlgorithm, Signer, sign_message


def _b64url(value: bytes) -> str:
    return urlsafe_b64encode(value).rstrip(b"=").decode("ascii")


def _json_segment(value: Mapping[str, Any]) -> str:
    return _b64url(json.dumps(value, separators=(",", ":")).encode("utf-8"))


def _unix_time(iso_date: str) -> int:
    return int(datetime.fromisoformat(iso_date).timestamp())


def _issuer_id(issuer: Any) -> str | None:
    if isinstance(issuer, Mapping):
        return issuer.get("id")
    return issuer


def json_ld_to_unsigned_vc_jwt_content(
    credential: Mapping[str, Any],
    algorithm: KeyAlgorithm | str,
    kid: str,
) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Map a JSON-LD credential to the header and payload of its VC-JWT."""
    subject = dict(credential.get("credentialSubject") or {})
    jwk = subject.pop("jwk", None)

    vc = {
        key: value
        for key, value in credential.items()
        if key not in ("credentialSubject", "issued")
    }
    vc["credentialSubject"] = subject
    payload: Dict[str, Any] = {"vc": vc}
    if jwk is not None:
        payload["sub_jwk"] = jwk

    if credential.get("id"):
        payload["jti"] = credential["id"]

    issued = credential.get("issuanceDate") or credential.get("issued")
    if issued:
        payload["iat"] = payload["nbf"] = _unix_time(issued)

    expires = credential.get("expirationDate") or credential.get("validUntil")
    if expires:
        payload["exp"] = _unix_time(expires)

    if issuer_id := _issuer_id(credential.get("issuer")):
        payload["iss"] = issuer_id

    if subject.get("id"):
        payload["sub"] = subject["id"]

    header = {"alg": KeyAlgorithm(algorithm).jose_alg, "kid": kid, "typ": "JWT"}
    return header, payload


async def sign_jwt(
    payload: Mapping[str, Any], header: Mapping[str, Any], sign: Signer
) -> str:
    """Produce a compact JWS over the payload."""
    signing_input = f"{_json_segment(header)}.{_json_segment(payload)}"
    signature = await sign_message(sign, signing_input.encode("ascii"))
    return f"{signing_input}.{_b64url(signature)}"


def decode_jwt(token: str) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    """Decode header and payload without verifying the signature."""
    header = jwt.get_unverified_header(token)
    payload = jwt.decode(token, options={"verify_signature": False})
    return header, payload


def verify_jwt(token: str, public_jwk: Mapping[str, Any]) -> Dict[str, Any]:
    """Verify a JWT against a public JWK, returning its payload."""
    key = jwt.PyJWK(dict(public_jwk))
    header = jwt.get_unverified_header(token)
    return jwt.decode(
        token,
        key=key.key,
        algorithms=[header["alg"]],
        options={"verify_aud": False},
        leeway=120,
    )
