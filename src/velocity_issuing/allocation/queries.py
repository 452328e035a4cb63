"""Allocation list storage.

A capacity list is one askar record per (tenant, operator address, entity
name). Its ``freeIndexes`` are consumed front first, and only ever inside a
single store transaction, so two callers can never receive the same index.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Protocol, Sequence
from uuid import uuid4

from aries_askar import Store

from velocity_issuing.crypto import to_ethereum_address
from velocity_issuing.kms import KMS
from velocity_issuing.models import AllocationListEntry, Issuer

LOGGER = logging.getLogger(__name__)

STATE_OPEN = "open"
STATE_EXHAUSTED = "exhausted"


class AllocationError(Exception):
    """Raised on allocation errors."""


class AllocationListExhaustedError(AllocationError):
    """Raised when no allocation list with free indexes exists."""


class AllocationListQueries(Protocol):
    """Storage operations needed to allocate ledger list entries."""

    async def allocate_next_entry(
        self, entity_name: str, issuer: Issuer, kms: KMS
    ) -> AllocationListEntry:
        """Atomically take the next free entry of the current list.

        Raises:
            AllocationListExhaustedError: no list with free indexes exists
        """
        ...

    async def create_new_allocation_list(
        self,
        entity_name: str,
        issuer: Issuer,
        new_list_id: int,
        allocations: Sequence[int],
        kms: KMS,
    ) -> AllocationListEntry:
        """Record a new list, returning its first entry as already consumed."""
        ...


async def get_operator_address(issuer: Issuer, kms: KMS) -> str:
    """Resolve the operator address, deriving it from the KMS if needed."""
    if issuer.dlt_operator_address is not None:
        return issuer.dlt_operator_address

    if issuer.dlt_operator_kms_key_id is None:
        raise AllocationError(
            f"Issuer {issuer.id} has neither an operator address nor operator key"
        )

    key = await kms.export_key_or_secret(issuer.dlt_operator_kms_key_id)
    return to_ethereum_address(key["privateJwk"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


class AskarAllocationListQueries(AllocationListQueries):
    """Allocation lists kept in an askar store."""

    def __init__(self, store: Store, category: str = "allocations"):
        """Init the queries."""
        self.store = store
        self.category = category

    @staticmethod
    def _tags(
        issuer: Issuer, operator_address: str, entity_name: str, state: str
    ) -> Dict[str, str]:
        return {
            "tenantId": issuer.id,
            "operatorAddress": operator_address,
            "entityName": entity_name,
            "state": state,
        }

    async def allocate_next_entry(
        self, entity_name: str, issuer: Issuer, kms: KMS
    ) -> AllocationListEntry:
        """Atomically take the next free entry of the current list."""
        operator_address = await get_operator_address(issuer, kms)
        tag_filter = self._tags(issuer, operator_address, entity_name, STATE_OPEN)

        async with self.store.transaction() as txn:
            entries = await txn.fetch_all(
                self.category, tag_filter, limit=1, for_update=True
            )
            entry = next(iter(entries), None)
            if entry is not None:
                value: Dict[str, Any] = entry.value_json
                index = value["freeIndexes"].pop(0)
                value["updatedAt"] = _now()
                state = STATE_OPEN if value["freeIndexes"] else STATE_EXHAUSTED
                await txn.replace(
                    self.category,
                    entry.name,
                    value_json=value,
                    tags=self._tags(issuer, operator_address, entity_name, state),
                )
                await txn.commit()

        if entry is None:
            raise AllocationListExhaustedError(
                f"No free {entity_name} entries for tenant {issuer.id}"
            )

        LOGGER.debug(
            "Allocated %s entry %s:%s", entity_name, value["currentListId"], index
        )
        return AllocationListEntry(
            list_id=value["currentListId"], index=index, is_new_list=False
        )

    async def create_new_allocation_list(
        self,
        entity_name: str,
        issuer: Issuer,
        new_list_id: int,
        allocations: Sequence[int],
        kms: KMS,
    ) -> AllocationListEntry:
        """Record a new list, returning its first entry as already consumed."""
        if not allocations:
            raise AllocationError("A new allocation list needs at least one index")

        operator_address = await get_operator_address(issuer, kms)
        free_indexes = list(allocations[1:])
        now = _now()
        state = STATE_OPEN if free_indexes else STATE_EXHAUSTED

        async with self.store.session() as session:
            await session.insert(
                self.category,
                str(uuid4()),
                value_json={
                    "tenantId": issuer.id,
                    "entityName": entity_name,
                    "operatorAddress": operator_address,
                    "currentListId": new_list_id,
                    "freeIndexes": free_indexes,
                    "createdAt": now,
                    "updatedAt": now,
                },
                tags=self._tags(issuer, operator_address, entity_name, state),
            )

        LOGGER.info(
            "Created %s list %s for tenant %s", entity_name, new_list_id, issuer.id
        )
        return AllocationListEntry(
            list_id=new_list_id, index=allocations[0], is_new_list=True
        )
