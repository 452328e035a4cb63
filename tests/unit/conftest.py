from pathlib import Path
from typing import Any, Iterable, List, Mapping

import pytest
import pytest_asyncio
from aries_askar import Store

from velocity_issuing.allocation.queries import AskarAllocationListQueries
from velocity_issuing.config import IssuingConfig
from velocity_issuing.context import IssuingContext
from velocity_issuing.crypto import KeyAlgorithm
from velocity_issuing.kms import AskarKMS
from velocity_issuing.ledger.base import AlgType, WalletNotRegisteredError
from velocity_issuing.models import CredentialTypeMetadata, Issuer

UNIT_TEST_DIR = Path(__file__).parent

REVOCATION_CONTRACT_ADDRESS = "0x5Ba4E2D0d1e1D9A2a1a8b3F1a4C6B1B4a3C2D1E0"
METADATA_CONTRACT_ADDRESS = "0x9C1e4F3a2B7d6E5c4A3b2C1d0E9f8A7b6C5d4E3F"
CAO_DID = "did:ion:cao"


def pytest_collection_modifyitems(config, items: Iterable[pytest.Item]):
    for item in items:
        path = Path(item.fspath)
        if path.is_relative_to(UNIT_TEST_DIR):
            item.add_marker(pytest.mark.unit)


class FakeRevocationRegistry:
    """Records revocation contract calls."""

    def __init__(self):
        self.calls: List[tuple] = []
        self.wallet_registered = True

    async def add_revocation_list_signed(self, list_id: int, cao_did: str):
        self.calls.append(("addRevocationListSigned", list_id, cao_did))
        if not self.wallet_registered:
            raise WalletNotRegisteredError("wallet not in registry")
        return True

    async def add_wallet_to_registry_signed(self, cao_did: str):
        self.calls.append(("addWalletToRegistrySigned", cao_did))
        self.wallet_registered = True
        return True


class FakeMetadataRegistry:
    """Records metadata contract calls."""

    def __init__(self):
        self.lists: List[tuple] = []
        self.entries: List[tuple] = []
        self.error: Exception | None = None

    async def create_credential_metadata_list(
        self,
        account_id: str,
        list_id: int,
        issuer_vc: str,
        cao_did: str,
        alg_type: AlgType,
    ) -> bool:
        self.lists.append((account_id, list_id, issuer_vc, cao_did, alg_type))
        return True

    async def add_credential_metadata_entry(
        self,
        metadata: Mapping[str, Any],
        password: str,
        cao_did: str,
        alg_type: AlgType,
    ) -> bool:
        if self.error:
            raise self.error
        self.entries.append((metadata, password, cao_did, alg_type))
        return True


class FakeRegistryProvider:
    """Hands out the fake registries, recording the keys they are bound to."""

    def __init__(self):
        self.revocation = FakeRevocationRegistry()
        self.metadata = FakeMetadataRegistry()
        self.bindings: List[tuple] = []

    async def revocation_registry(self, private_key: str, contract_address: str):
        self.bindings.append(("revocation", private_key, contract_address))
        return self.revocation

    async def metadata_registry(self, private_key: str, contract_address: str):
        self.bindings.append(("metadata", private_key, contract_address))
        return self.metadata


@pytest_asyncio.fixture
async def store():
    key = Store.generate_raw_key()
    store = await Store.provision("sqlite://:memory:", "raw", key, recreate=True)
    yield store
    await store.close()


@pytest.fixture
def kms(store: Store):
    yield AskarKMS(store)


@pytest.fixture
def config():
    yield IssuingConfig(
        revocation_contract_address=REVOCATION_CONTRACT_ADDRESS,
        metadata_registry_contract_address=METADATA_CONTRACT_ADDRESS,
        credential_extensions_context_url="https://lib.velocitynetwork.foundation/layer2-credential-extensions-v1.1.json",
    )


@pytest_asyncio.fixture
async def issuer(kms: AskarKMS):
    operator_key_id = await kms.create_key(KeyAlgorithm.SECP256K1)
    issuing_key_id = await kms.create_key(KeyAlgorithm.SECP256K1)
    yield Issuer.model_validate(
        {
            "tenantId": "tenant-1",
            "did": "did:ion:issuer",
            "dltPrimaryAddress": "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01",
            "dltOperatorKMSKeyId": operator_key_id,
            "issuingServiceId": "did:ion:issuer#credential-agent-operator-1",
            "issuingServiceKMSKeyId": issuing_key_id,
            "issuingServiceDIDKeyId": "did:ion:issuer#vc-signing-key-1",
        }
    )


@pytest.fixture
def registries():
    yield FakeRegistryProvider()


@pytest.fixture
def context(
    store: Store,
    kms: AskarKMS,
    config: IssuingConfig,
    registries: FakeRegistryProvider,
):
    yield IssuingContext(
        config=config,
        kms=kms,
        allocation_list_queries=AskarAllocationListQueries(store),
        registries=registries,
        cao_did=CAO_DID,
    )


@pytest.fixture
def credential_types_map():
    yield {
        "EmailV1.0": CredentialTypeMetadata(
            credential_type="EmailV1.0",
            schema_url="https://devregistrar.velocitynetwork.foundation/schemas/email-v1.0.schema.json",
            jsonld_context="https://lib.velocitynetwork.foundation/contexts/email-v1.0.jsonld",
            layer1=True,
        ),
        "EmploymentPastV1.1": CredentialTypeMetadata(
            credential_type="EmploymentPastV1.1",
            schema_url="https://devregistrar.velocitynetwork.foundation/schemas/employment-past-v1.1.schema.json",
            jsonld_context=[
                "https://lib.velocitynetwork.foundation/contexts/employment-v1.1.jsonld"
            ],
            default_signature_algorithm=KeyAlgorithm.P256,
        ),
    }


@pytest.fixture
def email_offer():
    yield {
        "_id": "65f1c0c0c0c0c0c0c0c0c0c0",
        "offerId": "offer-1",
        "exchangeId": "exchange-1",
        "type": ["EmailV1.0"],
        "issuer": {"id": "did:ion:vendor", "vendorOrganizationId": "org-1"},
        "credentialSubject": {
            "vendorUserId": "adam.smith@example.com",
            "email": "adam.smith@example.com",
        },
        "createdAt": "2024-03-01T10:00:00.000Z",
        "updatedAt": "2024-03-01T10:00:00.000Z",
    }
