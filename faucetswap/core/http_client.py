"""
Outbound HTTP client factory for chain RPC adapters.
No retries: a failed call surfaces immediately and the chain manager degrades it.
"""

from typing import Dict

import httpx

from faucetswap.infra.config.settings import get_settings

settings = get_settings()


def rpc_timeout(service: str) -> float:
    """Timeout in seconds for "evm_rpc", "sui_rpc" or anything else (default)"""
    return {
        "evm_rpc": settings.HTTP_EVM_RPC_TIMEOUT,
        "sui_rpc": settings.HTTP_SUI_RPC_TIMEOUT,
    }.get(service, settings.HTTP_DEFAULT_TIMEOUT)


def json_rpc_headers() -> Dict[str, str]:
    return {
        "User-Agent": f"FaucetSwap-Backend/{settings.APP_VERSION}",
        "Accept": "application/json",
        "Content-Type": "application/json",
    }


def create_client(service: str = "default", **overrides) -> httpx.AsyncClient:
    """
    Build an AsyncClient for one adapter. The adapter owns it and closes it.
    `overrides` go straight to httpx.AsyncClient (tests pass a MockTransport).
    """
    options = dict(
        timeout=httpx.Timeout(rpc_timeout(service)),
        limits=httpx.Limits(
            max_connections=settings.HTTP_MAX_CONNECTIONS,
            max_keepalive_connections=settings.HTTP_MAX_KEEPALIVE_CONNECTIONS
        ),
        headers=json_rpc_headers(),
        follow_redirects=False,
    )
    options.update(overrides)
    return httpx.AsyncClient(**options)
