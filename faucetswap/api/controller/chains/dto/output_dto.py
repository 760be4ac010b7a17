"""
Output DTOs for chain endpoints.
"""

from datetime import datetime
from typing import Dict, List

from pydantic import BaseModel

from faucetswap.core.service.chains.models import ChainInfo, ChainStatus


class AllChainsStatusDto(BaseModel):
    chains: List[ChainStatus]
    totalChains: int
    activeChains: int
    lastUpdated: datetime


class SupportedChainsDto(BaseModel):
    chains: List[str]
    configs: Dict[str, ChainInfo]
    count: int


class ChainRemovedDto(BaseModel):
    success: bool = True
    chainId: str
    message: str
