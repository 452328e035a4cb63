"""Allocate entries on ledger lists, rolling over to new lists when full."""

import logging
import secrets
from typing import TYPE_CHECKING, List

from velocity_issuing.allocation.queries import AllocationListExhaustedError
from velocity_issuing.models import AllocationListEntry, Issuer

if TYPE_CHECKING:
    from velocity_issuing.context import IssuingContext

LOGGER = logging.getLogger(__name__)

LIST_ID_DIGITS = 8


def generate_list_id() -> int:
    """Random list id with a fixed number of digits."""
    low = 10 ** (LIST_ID_DIGITS - 1)
    return low + secrets.randbelow(9 * low)


def new_list_allocations(list_size: int, origin: int = 0) -> List[int]:
    """Index range of a fresh list."""
    return list(range(origin, origin + list_size))


async def allocate_list_entry(
    issuer: Issuer,
    entity_name: str,
    list_size: int,
    context: "IssuingContext",
) -> AllocationListEntry:
    """Allocate one entry, creating a new list if the current one is full."""
    queries = context.allocation_list_queries
    try:
        return await queries.allocate_next_entry(entity_name, issuer, context.kms)
    except AllocationListExhaustedError:
        LOGGER.debug("No free %s entries, creating a new list", entity_name)

    return await queries.create_new_allocation_list(
        entity_name,
        issuer,
        generate_list_id(),
        new_list_allocations(list_size, context.config.list_index_origin),
        context.kms,
    )


async def allocate_list_entries(
    total: int,
    issuer: Issuer,
    entity_name: str,
    list_size: int,
    context: "IssuingContext",
) -> List[AllocationListEntry]:
    """Allocate entries one after the other.

    Allocation is sequential so that rolling over to a new list happens once
    per batch rather than once per concurrent caller.
    """
    entries = []
    for _ in range(total):
        entries.append(
            await allocate_list_entry(issuer, entity_name, list_size, context)
        )
    return entries
