"""Ledger list allocation."""

from velocity_issuing.allocation.allocator import (
    allocate_list_entries,
    allocate_list_entry,
    generate_list_id,
    new_list_allocations,
)
from velocity_issuing.allocation.queries import (
    AllocationError,
    AllocationListExhaustedError,
    AllocationListQueries,
    AskarAllocationListQueries,
    get_operator_address,
)

__all__ = [
    "AllocationError",
    "AllocationListExhaustedError",
    "AllocationListQueries",
    "AskarAllocationListQueries",
    "allocate_list_entries",
    "allocate_list_entry",
    "generate_list_id",
    "get_operator_address",
    "new_list_allocations",
]
