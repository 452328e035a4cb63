"""Ledger contract read URLs (``ethereum:`` URIs)."""

from typing import Tuple
from urllib.parse import parse_qs, urlencode, urlsplit

from velocity_issuing.models import AllocationListEntry, Issuer

GET_REVOKED_STATUS = "getRevokedStatus"
# Latin "C"; some deployed consumers spell it with a Cyrillic "С"
GET_METADATA_LIST_ISSUER_VC = "getCredentialMetadataListIssuerVC"


def _contract_call_url(contract_address: str, function: str, **parameters) -> str:
    return f"ethereum:{contract_address}/{function}?{urlencode(parameters)}"


def build_revocation_url(
    entry: AllocationListEntry, operator_address: str, contract_address: str
) -> str:
    """URL of the revocation contract call reporting the entry's status."""
    return _contract_call_url(
        contract_address,
        GET_REVOKED_STATUS,
        address=operator_address,
        listId=entry.list_id,
        index=entry.index,
    )


def parse_revocation_url(url: str, contract_address: str) -> Tuple[str, int, int]:
    """Parse a revocation URL into ``(address, list_id, index)``."""
    parts = urlsplit(url)
    target, _, function = parts.path.partition("/")
    if (
        parts.scheme != "ethereum"
        or target != contract_address
        or function != GET_REVOKED_STATUS
    ):
        raise ValueError(
            "Wrong url, please check the params: scheme, target_address, function_name"
        )

    params = parse_qs(parts.query)
    try:
        return params["address"][0], int(params["listId"][0]), int(params["index"][0])
    except (KeyError, ValueError) as err:
        raise ValueError(f"Malformed revocation url {url}") from err


def build_issuer_vc_url(list_id: int, issuer: Issuer, contract_address: str) -> str:
    """URL of the metadata contract call returning a list's issuer attestation."""
    return _contract_call_url(
        contract_address,
        GET_METADATA_LIST_ISSUER_VC,
        address=issuer.dlt_primary_address,
        listId=list_id,
    )
