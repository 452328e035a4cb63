"""Test credential building."""

import re

import pytest

from velocity_issuing.context import IssuingContext
from velocity_issuing.credentials.builder import (
    UnknownCredentialTypeError,
    build_verifiable_credentials,
)
from velocity_issuing.credentials.hashing import hash_offer
from velocity_issuing.crypto import KeyAlgorithm, generate_jwa_key_pair, get_2_bytes_hash
from velocity_issuing.jwt_vc import decode_jwt, verify_jwt
from velocity_issuing.models import AllocationListEntry

METADATA_LIST_ID = 11111111
REVOCATION_LIST_ID = 22222222


def entries(list_id: int, count: int):
    return [
        AllocationListEntry(list_id=list_id, index=index, is_new_list=index == 0)
        for index in range(count)
    ]


@pytest.fixture
def employment_offer():
    yield {
        "type": ["EmploymentPastV1.1"],
        "credentialSubject": {"role": "Engineer", "company": "did:ion:acme"},
    }


@pytest.mark.asyncio
async def test_build_credentials(
    issuer, context: IssuingContext, credential_types_map, email_offer, employment_offer
):
    offers = [email_offer, employment_offer]
    vcs = await build_verifiable_credentials(
        offers,
        None,
        issuer,
        entries(METADATA_LIST_ID, 2),
        entries(REVOCATION_LIST_ID, 2),
        credential_types_map,
        context,
    )

    assert [vc.metadata.credential_type for vc in vcs] == [
        "EmailV1.0",
        "EmploymentPastV1.1",
    ]
    for index, (vc, offer) in enumerate(zip(vcs, offers)):
        credential_id = f"did:velocity:v2:{issuer.dlt_primary_address.lower()}:{METADATA_LIST_ID}:{index}"
        assert vc.json_ld_credential["id"] == credential_id
        assert vc.metadata.index == index
        assert vc.metadata.list_id == METADATA_LIST_ID
        assert vc.metadata.content_hash == hash_offer(offer)
        assert vc.metadata.credential_type_encoded == get_2_bytes_hash(
            vc.metadata.credential_type
        )
        assert "d" not in vc.metadata.public_key
        assert re.search(
            f"listId={REVOCATION_LIST_ID}&index={index}$",
            vc.json_ld_credential["credentialStatus"]["id"],
        )

        header, payload = decode_jwt(vc.vc_jwt)
        assert header["kid"] == f"{credential_id}#key-1"
        assert payload["jti"] == credential_id
        assert verify_jwt(vc.vc_jwt, vc.metadata.public_key) == payload

    assert decode_jwt(vcs[0].vc_jwt)[0]["alg"] == "ES256K"
    assert decode_jwt(vcs[1].vc_jwt)[0]["alg"] == "ES256"
    assert vcs[0].metadata.public_key != vcs[1].metadata.public_key


@pytest.mark.asyncio
async def test_unknown_type_fails_before_signing(
    issuer, context: IssuingContext, credential_types_map, email_offer
):
    generated = []

    def key_generator(algorithm: KeyAlgorithm):
        generated.append(algorithm)
        return generate_jwa_key_pair(algorithm)

    context.key_generator = key_generator

    with pytest.raises(UnknownCredentialTypeError) as err:
        await build_verifiable_credentials(
            [email_offer, {"type": ["UnknownV1.0"], "credentialSubject": {}}],
            None,
            issuer,
            entries(METADATA_LIST_ID, 2),
            entries(REVOCATION_LIST_ID, 2),
            credential_types_map,
            context,
        )
    assert err.value.credential_type == "UnknownV1.0"
    assert generated == []


@pytest.mark.asyncio
async def test_mismatched_entries(
    issuer, context: IssuingContext, credential_types_map, email_offer
):
    with pytest.raises(ValueError):
        await build_verifiable_credentials(
            [email_offer],
            None,
            issuer,
            entries(METADATA_LIST_ID, 2),
            entries(REVOCATION_LIST_ID, 1),
            credential_types_map,
            context,
        )


@pytest.mark.asyncio
async def test_content_hash_suffix(
    issuer, context: IssuingContext, credential_types_map, email_offer
):
    context.config.credential_id_content_hash_suffix = True
    (vc,) = await build_verifiable_credentials(
        [email_offer],
        "did:jwk:holder",
        issuer,
        entries(METADATA_LIST_ID, 1),
        entries(REVOCATION_LIST_ID, 1),
        credential_types_map,
        context,
    )
    assert vc.json_ld_credential["id"].endswith(f":{hash_offer(email_offer)}")
    assert decode_jwt(vc.vc_jwt)[1]["sub"] == "did:jwk:holder"
