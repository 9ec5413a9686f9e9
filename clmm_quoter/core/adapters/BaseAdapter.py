from __future__ import annotations

from abc import ABC
from typing import Any

from loguru import logger

from clmm_quoter.core.constants.chains import CHAIN_ID_ETHEREUM, resolve_chain_id


class BaseAdapter(ABC):
    adapter_type: str | None = None

    def __init__(self, name: str, config: dict[str, Any] | None = None):
        self.name = name
        self.config = config or {}
        self.chain_id: int = resolve_chain_id(self.config.get("chain_id", CHAIN_ID_ETHEREUM))
        self.logger = logger.bind(adapter=self.__class__.__name__, chain_id=self.chain_id)

    async def close(self) -> None:
        pass
