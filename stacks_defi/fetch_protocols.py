# fetch_protocols.py
# Protocols that publish their own stats (ALEX, Arkadiko, Velar).
# Each has several candidate endpoints with different payload shapes; we take
# the first one that works, then fall back to a CoinGecko estimate, then give up.

import logging
from typing import List, Optional

from . import config
from .fallback import try_endpoints
from .fetch_prices import get_market_estimate
from .normalize import now_iso

logger = logging.getLogger(__name__)


def _num(x) -> float:
    if isinstance(x, bool):
        return 0.0
    try:
        return float(x)
    except (TypeError, ValueError):
        return 0.0


def _pick(d: dict, *keys) -> float:
    """First truthy numeric value among `keys`, else 0."""
    for k in keys:
        v = _num(d.get(k))
        if v:
            return v
    return 0.0


class ProtocolStatsAdapter:
    def __init__(self, source: config.ProtocolSource, cfg: config.PipelineConfig, session=None):
        self.source = source
        self.cfg = cfg
        self.session = session
        self.name = source.id

    def _record(self, tvl: float, apy: float, volume: float, origin: str,
                collateral_ratio: Optional[float] = None) -> dict:
        src = self.source
        rec = {
            "id": src.id,
            "name": src.name,
            "protocol": src.name,
            "type": src.category,
            "tvl": tvl,
            "apy": apy,
            "liquidity": tvl * src.liquidity_multiplier,
            "token": src.token,
            "is_active": True,
            "volume_24h": volume,
            "last_updated": now_iso(),
            "url": src.url,
            "audit_status": "audited",
            "chain": self.cfg.target_chain,
            "source": origin,
        }
        if src.track_collateral:
            rec["collateral_ratio"] = collateral_ratio or config.DEFAULT_COLLATERAL_RATIO
        return rec

    def _parse_list(self, data: dict, endpoint: str) -> Optional[dict]:
        items = data.get(self.source.list_key)
        if not isinstance(items, list):
            return None
        items = [i for i in items if isinstance(i, dict)]

        tvl = sum(_pick(i, "tvl", "totalValueLocked") for i in items)
        volume = sum(_pick(i, "volume24h", "dailyVolume") for i in items)
        apy = 0.0
        collateral = None
        if items:
            apy = sum(_pick(i, "apy", "annualPercentageYield") for i in items) / len(items)
            collateral = sum(
                _pick(i, "collateralRatio") or config.DEFAULT_COLLATERAL_RATIO for i in items
            ) / len(items)

        return self._record(tvl, apy or self.source.default_apy, volume, endpoint, collateral)

    def _parse_totals(self, data: dict, endpoint: str) -> Optional[dict]:
        tvl = _pick(data, "totalValueLocked", "tvl")
        if not tvl:
            return None
        if self.source.totals_first:
            apy = _pick(data, "averageApy", "apy", "annualPercentageYield")
        else:
            apy = _pick(data, "annualPercentageYield", "apy")
        volume = _pick(data, "dailyVolume", "volume24h")
        collateral = _pick(data, "averageCollateralRatio", "collateralRatio")
        return self._record(tvl, apy or self.source.default_apy, volume, endpoint, collateral)

    def parse(self, payload, endpoint: str) -> Optional[dict]:
        """Map one endpoint's JSON to a raw record, or None if the shape is unknown."""
        if not isinstance(payload, dict):
            return None
        parsers = [self._parse_list, self._parse_totals]
        if self.source.totals_first:
            parsers.reverse()
        for p in parsers:
            rec = p(payload, endpoint)
            if rec is not None:
                return rec
        return None

    def from_price_reference(self) -> Optional[dict]:
        """Rough numbers from CoinGecko when the protocol's own API is unreachable."""
        if not self.source.coingecko_id:
            return None
        est = get_market_estimate(self.source.coingecko_id, self.cfg, session=self.session)
        if est is None:
            return None
        tvl = _num(est.get("tvl")) or self.source.estimate_tvl
        volume = _num(est.get("volume_24h")) or self.source.estimate_volume
        return self._record(tvl, self.source.default_apy, volume, "coingecko")

    def fetch_one(self) -> Optional[dict]:
        try:
            rec = try_endpoints(
                self.source.endpoints,
                self.parse,
                timeout=self.cfg.endpoint_timeout,
                session=self.session,
            )
            if rec is None:
                logger.info("%s API failed, trying CoinGecko...", self.source.name)
                rec = self.from_price_reference()
            if rec is None:
                logger.info("All %s sources failed", self.source.name)
            return rec
        except Exception as e:
            logger.warning("Error fetching %s data: %s", self.source.name, e)
            return None

    def fetch(self) -> List[dict]:
        rec = self.fetch_one()
        return [rec] if rec is not None else []
