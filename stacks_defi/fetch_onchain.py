# fetch_onchain.py
# Our own staking pools, read straight from the staking contract.

import logging
from typing import Callable, Iterator, List, Optional, Tuple

from . import config
from .chain import ReadOnlyClient
from .clarity import encode_principal, encode_uint
from .models import UserPosition
from .normalize import now_iso

logger = logging.getLogger(__name__)

OWN_PROTOCOL_LABEL = "YieldFarm V9"


def discover_pools(read_pool: Callable[[int], Optional[dict]], max_pools: int = config.MAX_POOLS) -> Iterator[Tuple[int, dict]]:
    """
    Yield (index, pool) for pool 0, 1, 2, ... until the first read that raises,
    or until `max_pools`. Empty slots are skipped.

    There's no pool-count getter on the contract, so the first failure is taken
    to mean "no more pools". A transient RPC error therefore hides every pool
    after it.
    """
    for index in range(max_pools):
        try:
            pool = read_pool(index)
        except Exception as e:
            logger.debug("Pool discovery stopped at index %d: %s", index, e)
            return
        if not pool:
            continue
        yield index, pool


def _num(pool: dict, key: str) -> float:
    v = pool.get(key)
    if isinstance(v, bool) or v is None:
        return 0.0
    try:
        return float(v)
    except (TypeError, ValueError):
        return 0.0


def pool_to_record(index: int, pool: dict, cfg: config.PipelineConfig) -> dict:
    staked = _num(pool, "total-staked") / config.ONCHAIN_DECIMALS
    return {
        "id": f"own-pool-{index}",
        "name": f"sBTC Yield Pool #{index}",
        "protocol": OWN_PROTOCOL_LABEL,
        "type": "staking",
        "tvl": staked,
        "apy": _num(pool, "reward-rate") * 365 * 100,
        "liquidity": staked,
        "token": "sBTC",
        "is_active": pool.get("is-active") is True,
        "duration_blocks": _num(pool, "duration-blocks"),
        "total_rewards": _num(pool, "total-rewards") / config.ONCHAIN_DECIMALS,
        "participants": _num(pool, "total-participants"),
        "last_updated": now_iso(),
        "url": cfg.pool_url_template.format(pool_id=index),
        "audit_status": "audited",
        "chain": cfg.target_chain,
        "source": "own-pools",
    }


class OwnPoolsAdapter:
    name = "own-pools"

    def __init__(self, cfg: config.PipelineConfig, client: ReadOnlyClient):
        self.cfg = cfg
        self.client = client

    def read_pool(self, index: int):
        return self.client.call_read_only(
            self.cfg.contract_address,
            self.cfg.staking_contract_name,
            "get-pool-info",
            [encode_uint(index)],
        )

    def pools(self) -> List[Tuple[int, dict]]:
        return list(discover_pools(self.read_pool, self.cfg.max_pools))

    def fetch(self) -> List[dict]:
        try:
            return [pool_to_record(i, pool, self.cfg) for i, pool in self.pools()]
        except Exception as e:
            logger.warning("Error fetching own pools: %s", e)
            return []

    def fetch_user_positions(self, wallet_address: str) -> List[UserPosition]:
        """
        Stakes held by `wallet_address` in pools 0 .. max_pools-1. Each index is
        read on its own; a failed lookup or a zero amount skips that pool only.
        """
        try:
            principal = encode_principal(wallet_address)
        except Exception as e:
            logger.warning("Error fetching user positions: %s", e)
            return []

        positions = []
        for index in range(self.cfg.max_pools):
            try:
                stake = self.client.call_read_only(
                    self.cfg.contract_address,
                    self.cfg.staking_contract_name,
                    "get-user-stake",
                    [encode_uint(index), principal],
                )
            except Exception as e:
                logger.debug("No stake read for pool %d: %s", index, e)
                continue
            if not isinstance(stake, dict):
                continue

            amount = _num(stake, "amount")
            if amount <= 0:
                continue
            positions.append(UserPosition(
                pool_id=index,
                protocol=OWN_PROTOCOL_LABEL,
                category="staking",
                token="sBTC",
                amount=amount / config.ONCHAIN_DECIMALS,
                start_block=int(_num(stake, "start-block")),
                rewards_earned=_num(stake, "rewards-earned") / config.ONCHAIN_DECIMALS,
                last_updated=now_iso(),
            ))
        return positions
