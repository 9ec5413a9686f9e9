CHAIN_ID_ETHEREUM = 1
CHAIN_ID_OPTIMISM = 10
CHAIN_ID_BSC = 56
CHAIN_ID_POLYGON = 137
CHAIN_ID_BASE = 8453
CHAIN_ID_ARBITRUM = 42161
CHAIN_ID_AVALANCHE = 43114

CHAIN_CODE_TO_ID = {
    "ethereum": CHAIN_ID_ETHEREUM,
    "mainnet": CHAIN_ID_ETHEREUM,
    "optimism": CHAIN_ID_OPTIMISM,
    "bsc": CHAIN_ID_BSC,
    "polygon": CHAIN_ID_POLYGON,
    "base": CHAIN_ID_BASE,
    "arbitrum": CHAIN_ID_ARBITRUM,
    "arbitrum-one": CHAIN_ID_ARBITRUM,
    "avalanche": CHAIN_ID_AVALANCHE,
}

# Chains whose block headers carry PoA extra data
POA_MIDDLEWARE_CHAIN_IDS: set[int] = {
    CHAIN_ID_BSC,
    CHAIN_ID_POLYGON,
    CHAIN_ID_AVALANCHE,
}


def resolve_chain_id(value: str | int) -> int:
    """Accept a numeric chain id or a chain code such as ``"base"``."""
    if isinstance(value, int):
        return value
    text = str(value).strip().lower()
    if text.isdigit():
        return int(text)
    chain_id = CHAIN_CODE_TO_ID.get(text)
    if chain_id is None:
        raise ValueError(
            f"Unknown chain {value!r}; expected a chain id or one of "
            f"{sorted(CHAIN_CODE_TO_ID)}"
        )
    return chain_id
