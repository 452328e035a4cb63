"""Test credential did building and parsing."""

import pytest

from velocity_issuing.did import (
    VelocityCredentialLocator,
    build_credential_did,
    parse_velocity_v2_did,
    to_relative_service_id,
)
from velocity_issuing.models import AllocationListEntry, Issuer

ISSUER = Issuer(
    id="tenant-1",
    did="did:ion:issuer",
    dlt_primary_address="0xAbCdEf01",
    issuing_service_id="#issuer-1",
    issuing_service_kms_key_id="kms-1",
    issuing_service_did_key_id="did:ion:issuer#key-1",
)
ENTRY = AllocationListEntry(list_id=12345678, index=42, is_new_list=False)


def test_build_credential_did():
    assert build_credential_did(ENTRY, ISSUER) == "did:velocity:v2:0xabcdef01:12345678:42"


def test_build_credential_did_with_content_hash():
    assert (
        build_credential_did(ENTRY, ISSUER, "ff00")
        == "did:velocity:v2:0xabcdef01:12345678:42:ff00"
    )


@pytest.mark.parametrize(
    ("did", "expected"),
    [
        (
            "did:velocity:v2:0xabc:1:2",
            [VelocityCredentialLocator("0xabc", 1, 2)],
        ),
        (
            "did:velocity:v2:0xabc:1:2:ff00",
            [VelocityCredentialLocator("0xabc", 1, 2, "ff00")],
        ),
        (
            "did:velocity:v2:multi:0xabc:1:2:ff00;0xdef:3:4:00ff",
            [
                VelocityCredentialLocator("0xabc", 1, 2, "ff00"),
                VelocityCredentialLocator("0xdef", 3, 4, "00ff"),
            ],
        ),
    ],
)
def test_parse_velocity_v2_did(did: str, expected):
    assert parse_velocity_v2_did(did) == expected


@pytest.mark.parametrize(
    "did",
    ["did:velocity:0xabc", "did:ion:123", "did:velocity:v2:0xabc:1", "did:velocity:v2:0xabc:x:2"],
)
def test_parse_velocity_v2_did_rejects(did: str):
    with pytest.raises(ValueError):
        parse_velocity_v2_did(did)


def test_round_trip_built_did():
    (locator,) = parse_velocity_v2_did(build_credential_did(ENTRY, ISSUER))
    assert (locator.account_id, locator.list_id, locator.index) == (
        "0xabcdef01",
        ENTRY.list_id,
        ENTRY.index,
    )


@pytest.mark.parametrize(
    ("service_id", "expected"),
    [
        ("did:ion:123#id-1", "#id-1"),
        ("id-1", "#id-1"),
        ("#id-1", "#id-1"),
    ],
)
def test_to_relative_service_id(service_id: str, expected: str):
    assert to_relative_service_id(service_id) == expected
