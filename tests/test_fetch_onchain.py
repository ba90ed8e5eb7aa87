import pytest

from stacks_defi.fetch_onchain import OwnPoolsAdapter, discover_pools

from fakes import FakeChainClient, make_pool

WALLET = "SP2J6ZY48GV1EZ5V2V5RB9MP66SW86PYKKNRV9EJ7"


def test_discovery_stops_at_first_error():
    def read(i):
        if i == 2:
            raise TimeoutError("rpc hiccup")
        return {"i": i}

    assert list(discover_pools(read, max_pools=10)) == [(0, {"i": 0}), (1, {"i": 1})]


def test_discovery_skips_empty_slots_and_stops_at_ceiling():
    pools = list(discover_pools(lambda i: None if i == 1 else {"i": i}, max_pools=4))
    assert pools == [(0, {"i": 0}), (2, {"i": 2}), (3, {"i": 3})]
    assert len(list(discover_pools(lambda i: {"i": i}, max_pools=3))) == 3


def test_pool_records(cfg):
    client = FakeChainClient(pools={
        0: make_pool(total_staked=250_000_000, reward_rate=0.001),
        1: make_pool(active=False),
    })
    records = OwnPoolsAdapter(cfg, client).fetch()

    assert [r["name"] for r in records] == ["sBTC Yield Pool #0", "sBTC Yield Pool #1"]
    first = records[0]
    assert first["id"] == "own-pool-0"
    assert first["protocol"] == "YieldFarm V9"
    assert first["type"] == "staking"
    assert first["tvl"] == 2.5
    assert first["liquidity"] == 2.5
    assert first["apy"] == pytest.approx(36.5)
    assert first["token"] == "sBTC"
    assert first["is_active"] is True
    assert first["total_rewards"] == 0.05
    assert first["participants"] == 12
    assert first["duration_blocks"] == 4320
    assert first["url"] == "https://app.yourprotocol.io/pool/0"
    assert first["audit_status"] == "audited"
    assert first["source"] == "own-pools"
    assert records[1]["is_active"] is False

    # probed 0, 1, then 2 failed
    assert client.calls == [("get-pool-info", 0), ("get-pool-info", 1), ("get-pool-info", 2)]


def test_empty_pool_does_not_hide_later_pools(cfg):
    client = FakeChainClient(pools={0: make_pool(), 1: None, 2: make_pool(), 3: make_pool()})
    records = OwnPoolsAdapter(cfg, client).fetch()

    assert [r["id"] for r in records] == ["own-pool-0", "own-pool-2", "own-pool-3"]
    assert ("get-pool-info", 4) in client.calls


def test_transient_error_truncates_later_pools(cfg):
    client = FakeChainClient(pools={i: make_pool() for i in range(5)}, fail_at=2)
    assert [r["id"] for r in OwnPoolsAdapter(cfg, client).fetch()] == ["own-pool-0", "own-pool-1"]


def test_no_pools(cfg):
    assert OwnPoolsAdapter(cfg, FakeChainClient()).fetch() == []


def test_user_positions(cfg):
    client = FakeChainClient(
        pools={0: make_pool(), 1: make_pool(), 2: make_pool()},
        stakes={
            0: {"amount": 150_000_000, "start-block": 1200, "rewards-earned": 1_000_000},
            1: {"amount": 0, "start-block": 1300, "rewards-earned": 0},
            # pool 2: lookup fails
        },
    )
    positions = OwnPoolsAdapter(cfg, client).fetch_user_positions(WALLET)

    assert len(positions) == 1
    p = positions[0]
    assert p.pool_id == 0
    assert p.amount == 1.5
    assert p.start_block == 1200
    assert p.rewards_earned == 0.01
    assert p.to_dict()["type"] == "staking"


def test_user_positions_bad_wallet(cfg):
    client = FakeChainClient(pools={0: make_pool()})
    assert OwnPoolsAdapter(cfg, client).fetch_user_positions("not-an-address") == []


def test_user_positions_survive_pool_read_failures(cfg):
    client = FakeChainClient(
        pools={0: make_pool()},
        fail_at=1,
        stakes={0: {"amount": 100_000_000}, 3: {"amount": 200_000_000}},
    )
    positions = OwnPoolsAdapter(cfg, client).fetch_user_positions(WALLET)

    assert [(p.pool_id, p.amount) for p in positions] == [(0, 1.0), (3, 2.0)]
    stake_reads = [i for fn, i in client.calls if fn == "get-user-stake"]
    assert stake_reads == list(range(cfg.max_pools))
