# fetch_llama.py
# Pull the DeFiLlama protocol listing, keep the ones deployed on our chain,
# and turn each into a raw record with a synthetic APY estimate.

import logging
import re
from typing import List

import pandas as pd

from . import config
from .http_client import get_json
from .normalize import now_iso

logger = logging.getLogger(__name__)


def estimate_apy(category, tvl) -> float:
    """
    DeFiLlama's protocol listing has no yield figure, so estimate one:
    each category has a (min, max, baseline, sensitivity) curve and bigger
    protocols drift toward the low end.
    """
    lo, hi, baseline, sensitivity = config.APY_CURVES.get(category, config.DEFAULT_APY_CURVE)
    try:
        tvl_millions = float(tvl or 0) / 1_000_000
    except (TypeError, ValueError):
        tvl_millions = 0.0
    return min(hi, max(lo, baseline - tvl_millions * sensitivity))


def infer_ticker(name, symbol=None, keywords=None) -> str:
    """
    Listing symbol if it has one, otherwise the first keyword found in the
    name, otherwise the first few letters of the name.
    """
    if isinstance(symbol, str) and symbol.strip() and symbol.strip() != "-":
        return symbol.strip()

    name = name if isinstance(name, str) else ""
    upper = name.upper()
    for keyword, ticker in (keywords if keywords is not None else config.TICKER_KEYWORDS):
        if keyword.upper() in upper:
            return ticker

    letters = re.sub(r"[^A-Za-z]", "", name)
    return letters[:config.TICKER_FALLBACK_LENGTH].upper()


def _on_chain(chains, target: str) -> bool:
    if not isinstance(chains, (list, tuple)):
        return False
    target = target.lower()
    return any(isinstance(c, str) and c.lower() == target for c in chains)


def _clean(value):
    # DataFrame rows carry NaN for keys a protocol didn't have.
    if isinstance(value, float) and pd.isna(value):
        return None
    return value


class DefiLlamaAdapter:
    name = "defillama"

    def __init__(self, cfg: config.PipelineConfig, session=None):
        self.cfg = cfg
        self.session = session

    def get_protocols(self) -> pd.DataFrame:
        """
        Fetch the full listing as a DataFrame filtered to our chain.
        Columns we care about: name, slug, category, tvl, chains, symbol, url,
        audit_links, volume24h.
        """
        try:
            data = get_json(self.cfg.defillama_url, timeout=self.cfg.http_timeout, session=self.session)
            df = pd.DataFrame(data if isinstance(data, list) else [])
        except Exception as e:
            logger.warning("DeFiLlama fetch failed: %s", e)
            df = pd.DataFrame()

        if df.empty or "chains" not in df.columns:
            return pd.DataFrame()

        mask = df["chains"].apply(lambda c: _on_chain(c, self.cfg.target_chain))
        return df[mask].reset_index(drop=True)

    def fetch(self) -> List[dict]:
        df = self.get_protocols()
        logger.info("Found %d %s protocols on DeFiLlama", len(df), self.cfg.target_chain)
        if df.empty:
            return []

        records = []
        for row in df.to_dict("records"):
            row = {k: _clean(v) for k, v in row.items()}
            name = row.get("name")
            category = row.get("category")
            tvl = row.get("tvl") or 0
            audit_links = row.get("audit_links")

            rec = {
                "name": name,
                "protocol": name,
                "type": category or "unknown",
                "tvl": tvl,
                "apy": estimate_apy(category, tvl),
                "liquidity": tvl,
                "token": infer_ticker(name, row.get("symbol")),
                "is_active": True,
                "volume_24h": row.get("volume24h") or 0,
                "last_updated": now_iso(),
                "url": row.get("url") or "#",
                "audit_status": "audited" if isinstance(audit_links, list) and audit_links else "unaudited",
                "chain": self.cfg.target_chain,
                "source": "defillama",
            }
            slug = row.get("slug")
            if isinstance(slug, str) and slug:
                rec["id"] = f"defillama-{slug}"
            records.append(rec)
        return records
