# fetch_prices.py
# Spot prices from CoinGecko. Also the rough TVL/volume estimate used when a
# protocol's own stats endpoints are all down.

import logging
from typing import Optional

from . import config
from .http_client import get_json

logger = logging.getLogger(__name__)


def get_usd_price(coin_id: str, cfg: config.PipelineConfig = None, session=None) -> Optional[float]:
    """
    Returns the USD price for a CoinGecko coin id.
    If the call fails or the coin is missing, returns None.
    """
    cfg = cfg or config.PipelineConfig()
    try:
        data = get_json(
            f"{cfg.coingecko_url}/simple/price",
            params={"ids": coin_id, "vs_currencies": "usd"},
            timeout=cfg.http_timeout,
            session=session,
        )
        usd = (data.get(coin_id) or {}).get("usd")
        if usd is None:
            return None
        return float(usd)
    except Exception as e:
        logger.warning("Price lookup for %s failed: %s", coin_id, e)
        return None


def get_stx_price(cfg: config.PipelineConfig = None, session=None) -> Optional[float]:
    return get_usd_price("blockstack", cfg, session)


def get_btc_price(cfg: config.PipelineConfig = None, session=None) -> Optional[float]:
    return get_usd_price("bitcoin", cfg, session)


def get_market_estimate(coin_id: str, cfg: config.PipelineConfig, session=None) -> Optional[dict]:
    """
    Pull /coins/<id> and return {"tvl": ..., "volume_24h": ...} in USD,
    with either value None if CoinGecko doesn't report it.
    Returns None if the request itself fails.
    """
    try:
        data = get_json(f"{cfg.coingecko_url}/coins/{coin_id}", timeout=cfg.http_timeout, session=session)
    except Exception as e:
        logger.info("CoinGecko estimate for %s failed: %s", coin_id, e)
        return None

    if not isinstance(data, dict):
        return None
    market = data.get("market_data") or {}

    def _usd(key):
        v = market.get(key)
        return v.get("usd") if isinstance(v, dict) else None

    return {"tvl": _usd("total_value_locked"), "volume_24h": _usd("total_volume")}
