# fetch_tokens.py
# Stacks token listing: keep DeFi-looking tokens and treat market cap as their "TVL".

import logging
from typing import List

import pandas as pd

from . import config
from .http_client import get_json
from .normalize import now_iso

logger = logging.getLogger(__name__)


def _numeric(df: pd.DataFrame, col: str) -> pd.Series:
    # Missing column or unparseable values count as 0.
    if col not in df.columns:
        return pd.Series(0.0, index=df.index)
    return pd.to_numeric(df[col], errors="coerce").fillna(0)


class TokenListAdapter:
    name = "stacks-api"

    def __init__(self, cfg: config.PipelineConfig, session=None,
                 keywords=None, min_market_cap=config.MIN_TOKEN_MARKET_CAP):
        self.cfg = cfg
        self.session = session
        self.keywords = [k.lower() for k in (keywords or config.TOKEN_NAME_KEYWORDS)]
        self.min_market_cap = min_market_cap

    def _matches(self, name) -> bool:
        if not isinstance(name, str) or not name:
            return False
        lowered = name.lower()
        return any(k in lowered for k in self.keywords)

    def get_tokens(self) -> pd.DataFrame:
        """
        Returns a DataFrame of matching tokens with a `market_cap` column,
        already filtered by the market-cap floor. Empty on any failure.
        """
        try:
            data = get_json(self.cfg.tokens_url, timeout=self.cfg.http_timeout, session=self.session)
            df = pd.DataFrame(data.get("results", []) or [])
        except Exception as e:
            logger.warning("Stacks token list fetch failed: %s", e)
            return pd.DataFrame()

        if df.empty or "name" not in df.columns:
            return pd.DataFrame()

        df = df[df["name"].apply(self._matches)].copy()
        logger.info("Found %d DeFi tokens from Stacks API", len(df))
        if df.empty:
            return df

        df["market_cap"] = _numeric(df, "total_supply") * _numeric(df, "price_usd")

        return df[df["market_cap"] >= self.min_market_cap].reset_index(drop=True)

    def fetch(self) -> List[dict]:
        df = self.get_tokens()
        if df.empty:
            return []

        records = []
        for row in df.to_dict("records"):
            contract_id = row.get("contract_id")
            symbol = row.get("symbol")
            market_cap = float(row["market_cap"])
            rec = {
                "name": row["name"],
                "protocol": row["name"],
                "type": "token",
                "tvl": market_cap,
                "apy": 0,
                "liquidity": market_cap,
                "token": symbol if isinstance(symbol, str) and symbol else "STX",
                "is_active": True,
                "volume_24h": 0,
                "last_updated": now_iso(),
                "audit_status": "unknown",
                "chain": self.cfg.target_chain,
                "source": "stacks-api",
            }
            # no contract id: normalize derives one from source and name
            if isinstance(contract_id, str) and contract_id:
                rec["id"] = f"stacks-{contract_id}"
                rec["url"] = config.STACKS_EXPLORER_TOKEN_URL.format(contract_id=contract_id)
            records.append(rec)
        return records
