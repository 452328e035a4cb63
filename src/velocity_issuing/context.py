"""Collaborators shared by the issuing pipeline."""

from dataclasses import dataclass

from velocity_issuing.allocation.queries import AllocationListQueries
from velocity_issuing.config import IssuingConfig
from velocity_issuing.crypto import KeyGenerator, generate_jwa_key_pair
from velocity_issuing.kms import KMS
from velocity_issuing.ledger.base import RegistryProvider


@dataclass
class IssuingContext:
    """Request scoped dependencies of an issuance."""

    config: IssuingConfig
    kms: KMS
    allocation_list_queries: AllocationListQueries
    registries: RegistryProvider
    cao_did: str
    key_generator: KeyGenerator = generate_jwa_key_pair
