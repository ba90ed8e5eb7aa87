from stacks_defi.fetch_tokens import TokenListAdapter
from stacks_defi.normalize import normalize

from fakes import FakeResponse, FakeSession

TOKENS = {"results": [
    {"name": "ALEX Token", "symbol": "ALEX", "contract_id": "SP1.age000", "total_supply": "1000000", "price_usd": 0.5},
    {"name": "Wrapped STX", "symbol": "wSTX", "contract_id": "SP2.wstx", "total_supply": 10, "price_usd": 2},
    {"name": "Meme Coin", "symbol": "MEME", "contract_id": "SP3.meme", "total_supply": 1e12, "price_usd": 1},
    {"name": "Yield Vault Share", "symbol": "", "contract_id": "SP4.yvs", "total_supply": 20000},
    {"name": "DeFi Index", "contract_id": "SP5.dfi", "total_supply": 10000, "price_usd": 1},
    {"name": None, "contract_id": "SP6.x", "total_supply": 1, "price_usd": 1},
]}


def test_filters_by_keyword_and_market_cap_floor(cfg):
    session = FakeSession({cfg.tokens_url: FakeResponse(TOKENS)})
    records = TokenListAdapter(cfg, session).fetch()

    # Meme Coin: no keyword. Wrapped STX: $20 cap. Yield Vault Share: no price -> $0.
    assert [r["name"] for r in records] == ["ALEX Token", "DeFi Index"]

    alex, dfi = records
    assert alex["tvl"] == 500_000
    assert alex["liquidity"] == 500_000
    assert alex["apy"] == 0
    assert alex["type"] == "token"
    assert alex["id"] == "stacks-SP1.age000"
    assert alex["url"] == "https://explorer.stacks.co/token/SP1.age000"
    assert alex["audit_status"] == "unknown"
    assert alex["source"] == "stacks-api"

    # exactly at the floor is kept; missing symbol falls back to STX
    assert dfi["tvl"] == 10_000
    assert dfi["token"] == "STX"


def test_failure_returns_empty(cfg):
    assert TokenListAdapter(cfg, FakeSession()).fetch() == []
    session = FakeSession({cfg.tokens_url: FakeResponse({"results": []})})
    assert TokenListAdapter(cfg, session).fetch() == []


def test_custom_keywords(cfg):
    session = FakeSession({cfg.tokens_url: FakeResponse(TOKENS)})
    records = TokenListAdapter(cfg, session, keywords=["meme"]).fetch()
    assert [r["name"] for r in records] == ["Meme Coin"]


def test_missing_contract_id_leaves_id_to_normalize(cfg):
    session = FakeSession({cfg.tokens_url: FakeResponse({"results": [
        {"name": "ALEX Wrapped", "total_supply": 1e6, "price_usd": 1},
        {"name": "ALEX Bridged", "contract_id": None, "total_supply": 1e6, "price_usd": 1},
    ]})})
    records = TokenListAdapter(cfg, session).fetch()

    assert all("id" not in r and "url" not in r for r in records)
    ids = [normalize(r).id for r in records]
    assert ids == ["stacks-api-alex-wrapped", "stacks-api-alex-bridged"]
