# normalize.py
# Map any raw record (whatever source it came from) onto the canonical ProtocolRecord.
# This never raises: missing, malformed or out-of-range values get a default.

import math
import re
import time
from datetime import datetime, timezone

from . import config
from .models import ProtocolRecord

MAX_APY = 10000.0
AUDIT_STATUSES = {"audited", "unaudited", "unknown"}

# Raw keys that already have a canonical slot. Everything else lands in `extras`.
_KNOWN_KEYS = {
    "id", "name", "protocol", "protocolLabel", "type", "category",
    "tvl", "totalValueLocked", "liquidity", "apy", "annualPercentageYield",
    "volume_24h", "volume24h", "dailyVolume", "token", "is_active", "isActive",
    "last_updated", "lastUpdated", "url", "audit_status", "auditStatus",
    "chain", "source", "risk_analysis",
}


def _first(raw: dict, *keys):
    """First key present with a non-None value."""
    for k in keys:
        v = raw.get(k)
        if v is not None:
            return v
    return None


def _to_float(x) -> float:
    """Coerce to a finite float; anything unusable becomes 0.0."""
    if isinstance(x, bool):
        return 0.0
    try:
        val = float(x)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(val):
        return 0.0
    return val


def _text(x, default: str) -> str:
    if x is None:
        return default
    s = str(x).strip()
    return s or default


def _slug(name: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", name.lower()).strip("-")


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _make_id(raw: dict, name, source) -> str:
    raw_id = raw.get("id")
    if raw_id not in (None, ""):
        return str(raw_id)
    if name and source:
        slug = _slug(str(name))
        if slug:
            return f"{source}-{slug}"
    return f"unknown-{int(time.time() * 1000)}"


def norm_audit_status(s) -> str:
    """Lower-case the audit status and fold anything unexpected into 'unknown'."""
    if not isinstance(s, str):
        return "unknown"
    t = s.strip().lower()
    return t if t in AUDIT_STATUSES else "unknown"


def normalize(raw) -> ProtocolRecord:
    """
    Return a NEW canonical record for `raw`. Does not mutate the input.

    Accepts None or a non-dict too, in which case every field is defaulted.
    """
    if not isinstance(raw, dict):
        raw = {}

    name_raw = raw.get("name")
    source_raw = raw.get("source")
    name = _text(name_raw, "Unknown Protocol")

    tvl = max(0.0, _to_float(_first(raw, "tvl", "totalValueLocked")))
    liquidity = max(0.0, _to_float(raw.get("liquidity")))
    if liquidity == 0.0:
        liquidity = tvl
    apy = min(MAX_APY, max(0.0, _to_float(_first(raw, "apy", "annualPercentageYield"))))
    volume = max(0.0, _to_float(_first(raw, "volume_24h", "volume24h", "dailyVolume")))

    is_active = _first(raw, "is_active", "isActive")

    extras = {k: v for k, v in raw.items() if k not in _KNOWN_KEYS}

    return ProtocolRecord(
        id=_make_id(raw, name_raw, source_raw),
        name=name,
        protocol_label=_text(_first(raw, "protocol", "protocolLabel"), _text(name_raw, "Unknown")),
        category=_text(_first(raw, "type", "category"), "unknown"),
        tvl=tvl,
        liquidity=liquidity,
        volume_24h=volume,
        apy=apy,
        token=_text(raw.get("token"), "-"),
        is_active=is_active is not False,
        last_updated=_text(_first(raw, "last_updated", "lastUpdated"), now_iso()),
        url=_text(raw.get("url"), "#"),
        audit_status=norm_audit_status(_first(raw, "audit_status", "auditStatus")),
        chain=_text(raw.get("chain"), config.TARGET_CHAIN),
        source=_text(source_raw, "unknown"),
        extras=extras,
    )
