import hashlib

import pytest

from levelpreview.routes import preview_api
from levelpreview.routes.preview_api import SEED_MAX_INT, _coerce_seed, get_cached_preview
from levelpreview.dungeon import SimulationConfig


def test_preview_basic(client):
    r = client.get("/api/preview?seed=5&depth=2&width=30&height=20")
    assert r.status_code == 200
    data = r.get_json()
    assert set(data) == {"seed", "depth", "width", "height", "provenance", "attempts", "exhausted", "rows", "text"}
    assert (data["seed"], data["depth"], data["width"], data["height"]) == (5, 2, 30, 20)
    assert len(data["rows"]) == 20
    assert all(len(row) == 30 for row in data["rows"])
    assert data["text"].startswith("┌")


def test_preview_is_deterministic(client, monkeypatch):
    monkeypatch.setenv("LEVELPREVIEW_DISABLE_CACHE", "1")
    a = client.get("/api/preview?seed=77&width=25&height=15").get_json()
    b = client.get("/api/preview?seed=77&width=25&height=15").get_json()
    assert a == b


def test_text_seed_is_hashed(client):
    data = client.get("/api/preview?seed=hello&width=20&height=12").get_json()
    digest = hashlib.sha256(b"hello").digest()
    assert data["seed"] == int.from_bytes(digest[:8], "big") % SEED_MAX_INT


def test_border_flag(client):
    data = client.get("/api/preview?seed=1&width=20&height=12&border=0").get_json()
    assert data["text"] == "\n".join(data["rows"])


def test_forced_map(client):
    data = client.get("/api/preview?seed=3&width=30&height=20&map=pillar_hall").get_json()
    assert data["provenance"].endswith(" + DES:pillar_hall")


def test_special_branch(client):
    data = client.get("/api/preview?seed=3&width=30&height=20&branch=Abyss").get_json()
    assert data["provenance"] == "branch=ABYSS:abyss"


def test_oversized_request_rejected(client):
    r = client.get("/api/preview?width=500&height=20")
    assert r.status_code == 400
    assert "120" in r.get_json()["error"]


def test_non_numeric_dimensions_use_defaults(client):
    data = client.get("/api/preview?seed=2&width=wide&height=10").get_json()
    assert (data["width"], data["height"]) == (100, 10)


def test_missing_source_root(client, test_app, monkeypatch):
    monkeypatch.setitem(test_app.config, "LEVELPREVIEW_SOURCE_ROOT", "")
    r = client.get("/api/preview?seed=1&width=20&height=10")
    assert r.status_code == 500
    assert r.get_json()["error"] == "source_root must be set"
    assert client.get("/api/vaults").status_code == 500


def test_vault_listing(client):
    data = client.get("/api/vaults").get_json()
    assert data["count"] == 4
    names = [v["name"] for v in data["vaults"]]
    assert names == ["small_grotto", "pillar_hall", "lair_pool", "orc_vault_gate"]
    assert data["vaults"][2]["origin"] == "branches/lair.des"


def test_vault_listing_by_branch(client):
    data = client.get("/api/vaults?branch=Lair:2").get_json()
    assert [v["name"] for v in data["vaults"]] == ["lair_pool"]


@pytest.mark.parametrize(
    "raw,expected",
    [(None, 0), ("", 0), ("  ", 0), ("42", 42), (" 7 ", 7), (5, 5), ("-1", SEED_MAX_INT - 1)],
)
def test_coerce_seed_numbers(raw, expected):
    assert _coerce_seed(raw) == expected


def test_coerce_seed_text_is_stable():
    assert _coerce_seed("abc") == _coerce_seed("abc")
    assert 0 <= _coerce_seed("abc") < SEED_MAX_INT
    assert _coerce_seed("abc") != _coerce_seed("abd")


class TestPreviewCache:
    def test_hit_returns_same_payload(self, source_root):
        config = SimulationConfig.build(source_root, seed=9, width=20, height=10)
        first = get_cached_preview(config)
        assert get_cached_preview(config) is first
        assert get_cached_preview(config, border=False) is not first

    def test_disable_flag_bypasses_cache(self, source_root, monkeypatch):
        monkeypatch.setenv("LEVELPREVIEW_DISABLE_CACHE", "1")
        config = SimulationConfig.build(source_root, seed=9, width=20, height=10)
        first = get_cached_preview(config)
        second = get_cached_preview(config)
        assert first == second
        assert first is not second
        assert preview_api._preview_cache == {}

    def test_cache_is_capped(self, source_root):
        for seed in range(12):
            get_cached_preview(SimulationConfig.build(source_root, seed=seed, width=10, height=8))
        assert len(preview_api._preview_cache) <= 8
