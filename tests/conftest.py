import os
import sys
import textwrap

import pytest

# Ensure repository root importable early
ROOT_DIR = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)

from levelpreview import create_app  # noqa: E402
from levelpreview.dungeon.pipeline import clear_simulator_cache  # noqa: E402
from levelpreview.routes.preview_api import clear_preview_cache  # noqa: E402

GROTTO_DES = textwrap.dedent(
    """\
    # plain D vaults
    NAME: small_grotto
    PLACE: D:2, D:3
    MAP
    xxxxx
    x...x
    x.<.x
    xxxxx
    ENDMAP

    NAME: pillar_hall
    MAP
    .....
    .x.x.
    .....
    ENDMAP
    """
)

LAIR_DES = textwrap.dedent(
    """\
    NAME: lair_pool
    : place("Lair:1")
    MAP
    ...
    .W.
    ...
    ENDMAP
    """
)

ORC_DES = textwrap.dedent(
    """\
    NAME: orc_vault_gate
    PLACE: Orc
    MAP
    ccccc
    c...c
    cc+cc
    ENDMAP
    """
)

OVERLAY_LUA = "\n".join(["-- decoration pass"] + [f"local v{i} = {i}" for i in range(150)]) + "\n"


@pytest.fixture()
def source_root(tmp_path):
    """A minimal game source tree: three .des files and one overlay script."""
    root = tmp_path / "source"
    des = root / "dat" / "des"
    (des / "branches").mkdir(parents=True)
    (des / "arrival.des").write_text(GROTTO_DES, encoding="utf-8")
    (des / "branches" / "lair.des").write_text(LAIR_DES, encoding="utf-8")
    (des / "branches" / "orc.des").write_text(ORC_DES, encoding="utf-8")
    dlua = root / "dat" / "dlua"
    dlua.mkdir(parents=True)
    (dlua / "decor.dlua").write_text(OVERLAY_LUA, encoding="utf-8")
    return root


@pytest.fixture()
def empty_source_root(tmp_path):
    root = tmp_path / "empty"
    root.mkdir()
    return root


@pytest.fixture(autouse=True)
def _fresh_caches():
    clear_simulator_cache()
    clear_preview_cache()
    yield
    clear_simulator_cache()
    clear_preview_cache()


@pytest.fixture()
def test_app(source_root, tmp_path, monkeypatch):
    app = create_app(TESTING=True, LEVELPREVIEW_SOURCE_ROOT=str(source_root), LEVELPREVIEW_MAX_DIMENSION=120)
    monkeypatch.setattr(app, "instance_path", str(tmp_path / "instance"))
    return app


@pytest.fixture()
def client(test_app):
    return test_app.test_client()
