import pytest

from stacks_defi.normalize import normalize

CANONICAL = [
    "id", "name", "protocol", "type", "tvl", "apy", "liquidity", "token", "is_active",
    "volume_24h", "last_updated", "url", "audit_status", "chain", "source",
]


@pytest.mark.parametrize("raw", [{}, None, "garbage", {"name": None, "tvl": None, "apy": None}])
def test_empty_input_gets_every_field(raw):
    p = normalize(raw)
    d = p.to_dict()
    for key in CANONICAL:
        assert d[key] is not None, key
    assert p.name == "Unknown Protocol"
    assert p.protocol_label == "Unknown"
    assert p.category == "unknown"
    assert p.tvl == 0.0 and p.liquidity == 0.0 and p.volume_24h == 0.0 and p.apy == 0.0
    assert p.token == "-"
    assert p.is_active is True
    assert p.url == "#"
    assert p.audit_status == "unknown"
    assert p.chain == "stacks"
    assert p.source == "unknown"
    assert p.id.startswith("unknown-")
    assert p.last_updated.endswith("Z")


def test_apy_is_clamped():
    assert normalize({"apy": 15000}).apy == 10000
    assert normalize({"apy": -4}).apy == 0
    assert normalize({"apy": "12.5"}).apy == 12.5
    assert normalize({"apy": float("inf")}).apy == 0
    assert normalize({"apy": "n/a"}).apy == 0


def test_negative_and_junk_numbers_become_zero():
    p = normalize({"tvl": -100, "volume_24h": "lots", "liquidity": float("nan")})
    assert p.tvl == 0
    assert p.volume_24h == 0
    assert p.liquidity == 0


def test_liquidity_defaults_to_tvl():
    assert normalize({"tvl": 500}).liquidity == 500
    assert normalize({"tvl": 500, "liquidity": 600}).liquidity == 600


def test_alternate_field_names():
    p = normalize({
        "name": "X",
        "totalValueLocked": 1000,
        "annualPercentageYield": 7,
        "dailyVolume": 55,
        "category": "Dexs",
        "protocolLabel": "X Finance",
        "isActive": False,
        "auditStatus": "AUDITED",
    })
    assert p.tvl == 1000
    assert p.apy == 7
    assert p.volume_24h == 55
    assert p.category == "Dexs"
    assert p.protocol_label == "X Finance"
    assert p.is_active is False
    assert p.audit_status == "audited"


def test_is_active_only_false_when_explicitly_false():
    assert normalize({"is_active": False}).is_active is False
    assert normalize({"is_active": 0}).is_active is True
    assert normalize({"is_active": None}).is_active is True


def test_unexpected_audit_status_is_unknown():
    assert normalize({"audit_status": "Score 87"}).audit_status == "unknown"


def test_id_derivation():
    assert normalize({"id": "alex"}).id == "alex"
    assert normalize({"name": "Zest Protocol", "source": "defillama"}).id == "defillama-zest-protocol"


def test_extra_fields_pass_through_and_input_is_untouched():
    raw = {"name": "Arkadiko", "tvl": 10, "collateral_ratio": 150}
    before = dict(raw)
    p = normalize(raw)
    assert raw == before
    assert p.extras == {"collateral_ratio": 150}
    d = p.to_dict()
    assert d["collateral_ratio"] == 150
    assert d["protocol"] == "Arkadiko"
    assert d["type"] == "unknown"
    assert "risk_analysis" not in d
