import random
from pathlib import Path

from levelpreview.dungeon.vaults import MapDefinition, filter_vaults, select_vaults


def make_vault(name, rows=("...",), hints=(), rel="misc.des"):
    return MapDefinition(
        name=name,
        origin=Path("dat/des") / rel,
        relative_origin=rel,
        rows=tuple(rows),
        place_hints=frozenset(hints),
    )


LIBRARY = (
    make_vault("grotto", hints=("D", "D:2")),
    make_vault("lair_pool", rel="branches/lair.des"),
    make_vault("crypt_hall", rel="branches/crypt.des"),
    make_vault("treasure_vault", hints=("D",)),
    make_vault("wide", rows=("." * 40,)),
)


def pick(rng=None, **kw):
    kw.setdefault("max_width", 30)
    kw.setdefault("max_height", 30)
    return select_vaults(LIBRARY, rng or random.Random(1), **kw)


def test_empty_pool_draws_nothing():
    rng = random.Random(5)
    before = rng.getstate()
    assert select_vaults((), rng, max_width=50, max_height=50) == []
    assert rng.getstate() == before


def test_forced_map_is_case_insensitive_and_draws_nothing():
    rng = random.Random(3)
    before = rng.getstate()
    chosen = pick(rng, map_name="GROTTO")
    assert [v.name for v in chosen] == ["grotto"]
    assert rng.getstate() == before


def test_forced_map_absent():
    assert pick(map_name="nowhere") == []


def test_forced_map_ignores_random_vault_switch():
    chosen = pick(map_name="treasure_vault", allow_random_vaults=False)
    assert [v.name for v in chosen] == ["treasure_vault"]


def test_random_vaults_disabled_excludes_vault_names_and_takes_one():
    for seed in range(30):
        chosen = pick(random.Random(seed), allow_random_vaults=False)
        assert len(chosen) == 1
        assert "vault" not in chosen[0].name


def test_branch_filter_by_hint_and_path():
    pool = filter_vaults(LIBRARY, "LAIR", True, 30, 30)
    assert [v.name for v in pool] == ["lair_pool"]
    pool = filter_vaults(LIBRARY, "CRYPT", True, 30, 30)
    assert [v.name for v in pool] == ["crypt_hall"]


def test_short_branch_code_matches_branch_paths_broadly():
    # "d" occurs in every ".des" path under branches/
    names = {v.name for v in filter_vaults(LIBRARY, "D", True, 30, 30)}
    assert names == {"grotto", "lair_pool", "crypt_hall", "treasure_vault"}


def test_no_branch_keeps_everything_that_fits():
    names = {v.name for v in filter_vaults(LIBRARY, None, True, 30, 30)}
    assert "wide" not in names
    assert len(names) == 4
    assert "wide" in {v.name for v in filter_vaults(LIBRARY, None, True, 40, 1)}


def test_selection_size_between_one_and_three():
    sizes = set()
    for seed in range(60):
        chosen = pick(random.Random(seed))
        assert 1 <= len(chosen) <= 3
        assert len({v.name for v in chosen}) == len(chosen)
        sizes.add(len(chosen))
    assert sizes == {1, 2, 3}


def test_selection_is_seed_deterministic():
    a = [v.name for v in pick(random.Random(42))]
    b = [v.name for v in pick(random.Random(42))]
    assert a == b
