# models.py
# Canonical shapes handed to the rest of the system (UI, advice/chat context).

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class RiskAnalysis:
    score: int
    category: str
    color: str
    factors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)
    recommendations: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "risk_score": self.score,
            "risk_category": self.category,
            "risk_color": self.color,
            "risk_factors": list(self.factors),
            "warnings": list(self.warnings),
            "recommendations": list(self.recommendations),
        }


@dataclass
class ProtocolRecord:
    """
    One protocol (or pool, or token) after normalization.

    Every field is always populated. `risk_analysis` is attached by the pipeline
    right after normalization. `extras` carries source-specific fields
    (collateral ratio, pool participants, ...) that have no canonical slot.
    """
    id: str
    name: str
    protocol_label: str
    category: str
    tvl: float
    liquidity: float
    volume_24h: float
    apy: float
    token: str
    is_active: bool
    last_updated: str
    url: str
    audit_status: str
    chain: str
    source: str
    risk_analysis: Optional[RiskAnalysis] = None
    extras: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Wire shape, as serialized for the UI and the advice subsystem."""
        out = dict(self.extras)
        out.update({
            "id": self.id,
            "name": self.name,
            "protocol": self.protocol_label,
            "type": self.category,
            "tvl": self.tvl,
            "apy": self.apy,
            "liquidity": self.liquidity,
            "token": self.token,
            "is_active": self.is_active,
            "volume_24h": self.volume_24h,
            "last_updated": self.last_updated,
            "url": self.url,
            "audit_status": self.audit_status,
            "chain": self.chain,
            "source": self.source,
        })
        if self.risk_analysis is not None:
            out["risk_analysis"] = self.risk_analysis.to_dict()
        return out


@dataclass
class UserPosition:
    pool_id: int
    protocol: str
    category: str
    token: str
    amount: float
    start_block: int
    rewards_earned: float
    last_updated: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "pool_id": self.pool_id,
            "protocol": self.protocol,
            "type": self.category,
            "token": self.token,
            "amount": self.amount,
            "start_block": self.start_block,
            "rewards_earned": self.rewards_earned,
            "last_updated": self.last_updated,
        }
