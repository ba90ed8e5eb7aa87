# risk_score.py
# Turn a normalized ProtocolRecord into a risk score (0-100, lower = safer),
# a category label, and human-readable factors / warnings / recommendations.
# Pure function of the record: no I/O, no clock, no randomness.

from typing import List

from .models import ProtocolRecord, RiskAnalysis

BASE_SCORE = 50

# (upper bound exclusive, label, color)
RISK_BRACKETS = [
    (30, "Low Risk", "green"),
    (50, "Medium Risk", "yellow"),
    (70, "High Risk", "orange"),
]
EXTREME = ("Extreme Risk", "red")

# category (lower-cased) -> (impact, description, warning or None)
CATEGORY_RISK = {
    "dex": (5, "Decentralized exchange - moderate risk", None),
    "dexs": (5, "Decentralized exchange - moderate risk", None),
    "lending": (10, "Lending platform - moderate to high risk", None),
    "derivatives": (20, "Derivatives trading - high risk",
                    "⚠️ Derivatives Protocol - High complexity and risk"),
    "liquid staking": (8, "Liquid staking - moderate risk", None),
    "liquid-staking": (8, "Liquid staking - moderate risk", None),
    "cdp": (12, "CDP - liquidation risk", None),
}

BRACKET_RECOMMENDATIONS = {
    "Low Risk": [
        "✅ Suitable for conservative investors",
        "📊 Good for long-term holdings",
    ],
    "Medium Risk": [
        "⚖️ Suitable for moderate risk tolerance",
        "💡 Consider diversifying your investment",
    ],
    "High Risk": [
        "⚠️ Only for experienced DeFi users",
        "💰 Do not invest more than 10% of portfolio",
        "📉 Monitor regularly for changes",
    ],
    "Extreme Risk": [
        "🚨 High risk - not recommended for most investors",
        "💸 Only invest what you can afford to lose",
        "🔍 Research thoroughly before investing",
        "⏰ Monitor position multiple times daily",
    ],
}


def categorize(score: int):
    """Map a clamped score to (label, color)."""
    for upper, label, color in RISK_BRACKETS:
        if score < upper:
            return label, color
    return EXTREME


def recommendations_for(record: ProtocolRecord, category: str) -> List[str]:
    recs = list(BRACKET_RECOMMENDATIONS[category])

    if 0 < record.tvl < 1_000_000:
        recs.append("💧 Low liquidity - large trades may have high slippage")
    if record.apy > 30:
        recs.append("📊 High APY may not be sustainable long-term")
    if record.audit_status != "audited":
        recs.append("🔒 Wait for security audit before large investments")

    return recs


def score(record: ProtocolRecord) -> RiskAnalysis:
    """
    Additive point system starting at 50. Factors are evaluated in a fixed order
    (TVL, APY, audit, category) followed by combination checks, then clamped.
    """
    points = BASE_SCORE
    factors: List[str] = []
    warnings: List[str] = []

    def add(impact: int, description: str, warning: str = None):
        nonlocal points
        points += impact
        factors.append(description)
        if warning:
            warnings.append(warning)

    tvl = record.tvl
    apy = record.apy
    audit = record.audit_status

    # 1. TVL: more value locked = more trust
    if tvl > 100_000_000:
        add(-20, "Very high Total Value Locked indicates strong trust")
    elif tvl > 10_000_000:
        add(-10, "Solid Total Value Locked")
    elif tvl > 1_000_000:
        add(0, "Moderate Total Value Locked")
    elif tvl > 100_000:
        add(15, "Low Total Value Locked - higher risk",
            "⚠️ Low TVL (<$1M) - Higher risk of impermanent loss")
    else:
        add(25, "Very low Total Value Locked - high risk",
            "🚨 Very Low TVL (<$100K) - High risk protocol")

    # 2. APY: very high yield is rarely sustainable
    if apy > 50:
        add(30, "Unsustainably high APY - likely high risk",
            "🚨 Extremely High APY (>50%) - Unsustainable, high risk of rug pull")
    elif apy > 30:
        add(20, "Very high APY - potentially risky",
            "⚠️ Very High APY (>30%) - High risk of impermanent loss")
    elif apy > 20:
        add(10, "High APY - moderate risk")
    elif apy > 10:
        add(5, "Healthy APY range")
    elif apy > 0:
        add(0, "Moderate APY - lower returns but safer")

    # 3. Audit
    if audit == "audited":
        add(-15, "Smart contracts have been audited")
    elif audit == "unaudited":
        add(20, "No security audit found",
            "⚠️ Not Audited - Smart contract risks not verified")
    else:
        add(10, "Audit status unclear")

    # 4. Protocol category
    cat = CATEGORY_RISK.get(record.category.strip().lower())
    if cat is not None:
        add(*cat)

    # 5. Combinations (no factor line, warning + points only)
    if apy > 10 and audit == "unaudited":
        points += 10
        warnings.append("🚨 HIGH RISK: High APY (>10%) + Not Audited")
    if tvl < 1_000_000 and apy > 15:
        points += 15
        warnings.append("🚨 EXTREME RISK: Low TVL (<$1M) + High APY (>15%)")

    points = max(0, min(100, points))
    label, color = categorize(points)

    return RiskAnalysis(
        score=points,
        category=label,
        color=color,
        factors=factors,
        warnings=warnings,
        recommendations=recommendations_for(record, label),
    )
