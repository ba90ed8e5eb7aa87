# config.py
# Central place for thresholds, labels, endpoints and mappings the rest of the pipeline uses.
# Nothing here is read at import time from the environment; PipelineConfig.from_env() does that.

import math
import os
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

# The single chain this pipeline cares about.
TARGET_CHAIN = "stacks"

# Stacks node API per network.
STACKS_API_URLS = {
    "mainnet": "https://api.hiro.so",
    "testnet": "https://api.testnet.hiro.so",
}
DEFAULT_NETWORK = "testnet"

# Our own staking contract (read-only calls only).
DEFAULT_CONTRACT_ADDRESS = "ST2422HP3GFF0X0EZ785C8QPGW5951ZF0QR39PEC5"
DEFAULT_STAKING_CONTRACT_NAME = "staking-deltav4"
OWN_POOL_URL_TEMPLATE = "https://app.yourprotocol.io/pool/{pool_id}"

# Highest pool index probed on the staking contract. Discovery ends earlier at the first failing read.
MAX_POOLS = 10

# Request timeouts (seconds).
HTTP_TIMEOUT = 10          # single-endpoint listing APIs
HTTP_TIMEOUT_MIN = 5       # lower bound for an HTTP_TIMEOUT_SECONDS override
ENDPOINT_TIMEOUT = 5       # each candidate of a multi-endpoint source
CHAIN_READ_TIMEOUT = 30    # read-only contract calls

# Every outbound request sends these.
REQUEST_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "AI-DeFi-Advisor/1.0",
}

DEFILLAMA_PROTOCOLS_URL = "https://api.llama.fi/protocols"
STACKS_TOKENS_URL = "https://api.stacks.co/extended/v1/tokens"
STACKS_EXPLORER_TOKEN_URL = "https://explorer.stacks.co/token/{contract_id}"
COINGECKO_API_URL = "https://api.coingecko.com/api/v3"

# sBTC and STX amounts on chain are in 1e-8 units.
ONCHAIN_DECIMALS = 1e8

# Token listing: skip anything with a market cap under this.
MIN_TOKEN_MARKET_CAP = 10000  # $10k

# Token listing: names must contain one of these (case-insensitive).
TOKEN_NAME_KEYWORDS = [
    "alex",
    "diko",
    "velar",
    "defi",
    "yield",
    "stackswap",
    "stx",
    "stacks",
]

# Synthetic APY curves for the DeFiLlama listing, keyed by DeFiLlama category.
# (min, max, baseline, tvl_sensitivity) -> clamp(baseline - sensitivity * tvl_millions, min, max)
APY_CURVES = {
    "Dexs": (5.0, 25.0, 15.0, 0.5),
    "Lending": (3.0, 20.0, 12.0, 0.3),
    "Liquid Staking": (2.0, 15.0, 8.0, 0.2),
    "CDP": (4.0, 18.0, 10.0, 0.4),
    "Derivatives": (8.0, 30.0, 20.0, 0.6),
}
DEFAULT_APY_CURVE = (2.0, 20.0, 10.0, 0.3)

# Ordered (keyword, ticker) pairs. First keyword found in the uppercased name wins.
# When nothing matches, the ticker is the first 4 letters of the name.
TICKER_KEYWORDS: List[Tuple[str, str]] = [
    ("ALEX", "ALEX"),
    ("VELAR", "VELAR"),
    ("ARKADIKO", "DIKO"),
    ("ZEST", "ZEST"),
    ("STACKSWAP", "STSW"),
    ("BITFLOW", "BITF"),
    ("STACKINGDAO", "STDAO"),
    ("LISA", "LISA"),
    ("XLINK", "XLINK"),
    ("GRANITE", "GRAN"),
    ("HERMETICA", "USDH"),
    ("SATOSHI", "SATS"),
    ("CITYCOINS", "CITY"),
    ("GATE", "GT"),
    ("UWU", "UWU"),
]
TICKER_FALLBACK_LENGTH = 4


@dataclass(frozen=True)
class ProtocolSource:
    """
    Describes one protocol that publishes its own stats on several candidate endpoints.

    - list_key: payload key holding per-pool/per-market rows (e.g. "pools", "markets")
    - totals_first: check the flat totals shape before the list shape
    - liquidity_multiplier: liquidity reported as tvl * multiplier
    - default_apy: used when the payload carries no usable APY
    - coingecko_id / estimate_tvl / estimate_volume: price-reference fallback
    """
    id: str
    name: str
    category: str
    token: str
    url: str
    endpoints: Tuple[str, ...]
    list_key: str = "pools"
    totals_first: bool = False
    liquidity_multiplier: float = 1.0
    default_apy: float = 0.0
    coingecko_id: Optional[str] = None
    estimate_tvl: float = 0.0
    estimate_volume: float = 0.0
    track_collateral: bool = False


ALEX = ProtocolSource(
    id="alex",
    name="ALEX",
    category="dex",
    token="ALEX",
    url="https://app.alexlab.co",
    endpoints=(
        "https://api.alexlab.co/v1/pools",
        "https://api.alexlab.co/v1/stats",
        "https://api.alexlab.co/stats",
        "https://alexlab.co/api/stats",
    ),
    list_key="pools",
    liquidity_multiplier=1.2,
    default_apy=12.5,
    coingecko_id="alex",
    estimate_tvl=15000000,
    estimate_volume=2500000,
)

ARKADIKO = ProtocolSource(
    id="arkadiko",
    name="Arkadiko",
    category="lending",
    token="DIKO",
    url="https://app.arkadiko.finance",
    endpoints=(
        "https://api.arkadiko.finance/api/v1/stats",
        "https://api.arkadiko.finance/api/v1/pools",
        "https://arkadiko.finance/api/stats",
        "https://arkadiko.finance/api/v1/tvl",
    ),
    list_key="pools",
    totals_first=True,
    liquidity_multiplier=1.15,
    default_apy=8.75,
    coingecko_id="arkadiko",
    estimate_tvl=8500000,
    track_collateral=True,
)

VELAR = ProtocolSource(
    id="velar",
    name="Velar",
    category="dex",
    token="VELAR",
    url="https://www.velar.co",
    endpoints=(
        "https://api.velar.co/v1/markets",
        "https://api.velar.co/v1/stats",
        "https://velar.co/api/stats",
        "https://velar.co/api/v1/tvl",
    ),
    list_key="markets",
    liquidity_multiplier=1.15,
    default_apy=15.2,
    coingecko_id="velar",
    estimate_tvl=12000000,
    estimate_volume=1800000,
)

# Default collateral ratio reported for CDP-style lending when the payload has none.
DEFAULT_COLLATERAL_RATIO = 150


@dataclass
class PipelineConfig:
    network: str = DEFAULT_NETWORK
    stacks_api_url: str = STACKS_API_URLS[DEFAULT_NETWORK]
    contract_address: str = DEFAULT_CONTRACT_ADDRESS
    staking_contract_name: str = DEFAULT_STAKING_CONTRACT_NAME
    pool_url_template: str = OWN_POOL_URL_TEMPLATE
    max_pools: int = MAX_POOLS
    http_timeout: float = HTTP_TIMEOUT
    endpoint_timeout: float = ENDPOINT_TIMEOUT
    chain_read_timeout: float = CHAIN_READ_TIMEOUT
    target_chain: str = TARGET_CHAIN
    defillama_url: str = DEFILLAMA_PROTOCOLS_URL
    tokens_url: str = STACKS_TOKENS_URL
    coingecko_url: str = COINGECKO_API_URL
    protocol_sources: List[ProtocolSource] = field(
        default_factory=lambda: [ALEX, ARKADIKO, VELAR]
    )

    @classmethod
    def from_env(cls) -> "PipelineConfig":
        """Build a config from STACKS_NETWORK, STACKS_API_URL, CONTRACT_ADDRESS, etc."""
        network = os.getenv("STACKS_NETWORK", DEFAULT_NETWORK).strip().lower()
        if network not in STACKS_API_URLS:
            network = DEFAULT_NETWORK

        timeout = os.getenv("HTTP_TIMEOUT_SECONDS")
        try:
            http_timeout = float(timeout) if timeout else HTTP_TIMEOUT
        except ValueError:
            http_timeout = HTTP_TIMEOUT
        if math.isnan(http_timeout):
            http_timeout = HTTP_TIMEOUT
        http_timeout = min(max(http_timeout, HTTP_TIMEOUT_MIN), HTTP_TIMEOUT)

        return cls(
            network=network,
            stacks_api_url=os.getenv("STACKS_API_URL") or STACKS_API_URLS[network],
            contract_address=os.getenv("CONTRACT_ADDRESS") or DEFAULT_CONTRACT_ADDRESS,
            staking_contract_name=os.getenv("STAKING_CONTRACT_NAME") or DEFAULT_STAKING_CONTRACT_NAME,
            http_timeout=http_timeout,
        )
