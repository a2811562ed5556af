import textwrap
from pathlib import Path

from levelpreview.dungeon.tiles import FLOOR, STAIRS_DOWN, STAIRS_UP, TRANSPARENT, WALL
from levelpreview.dungeon.vaults import load_vault_library, parse_des_text

ORIGIN = Path("dat/des/sample.des")


def parse(text):
    return parse_des_text(textwrap.dedent(text), ORIGIN, "sample.des")


def test_named_and_anonymous_blocks():
    maps = parse(
        """\
        NAME: first
        MAP
        ...
        ENDMAP
        MAP
        ##
        ENDMAP
        MAP
        <>
        ENDMAP
        """
    )
    assert [m.name for m in maps] == ["first", "anonymous-1", "anonymous-2"]
    assert maps[0].rows == ("...",)
    assert maps[0].relative_origin == "sample.des"


def test_name_does_not_leak_into_next_block():
    maps = parse(
        """\
        NAME: only_once
        MAP
        .
        ENDMAP
        MAP
        .
        ENDMAP
        """
    )
    assert [m.name for m in maps] == ["only_once", "anonymous-1"]


def test_place_directive_tokens_and_prefixes():
    (m,) = parse(
        """\
        NAME: hinted
        PLACE: D:5, Lair
        MAP
        .
        ENDMAP
        """
    )
    assert m.place_hints == {"D:5", "D", "LAIR"}


def test_place_call_in_lua_block():
    (m,) = parse(
        """\
        NAME: scripted
        : place("Orc:2")
        MAP
        .
        ENDMAP
        """
    )
    assert m.place_hints == {"ORC:2", "ORC"}


def test_hints_accumulate_across_file():
    first, second = parse(
        """\
        NAME: a
        PLACE: Snake
        MAP
        .
        ENDMAP
        NAME: b
        PLACE: Swamp:2
        MAP
        .
        ENDMAP
        """
    )
    assert first.place_hints == {"SNAKE"}
    assert second.place_hints == {"SNAKE", "SWAMP:2", "SWAMP"}


def test_unterminated_block_is_dropped():
    maps = parse(
        """\
        NAME: broken
        MAP
        ....
        ....
        """
    )
    assert maps == []


def test_stray_endmap_is_ignored():
    maps = parse(
        """\
        NAME: ghost
        ENDMAP
        MAP
        .
        ENDMAP
        """
    )
    assert [m.name for m in maps] == ["anonymous-1"]


def test_rows_are_kept_verbatim():
    text = "NAME: spaced\nMAP\n  x.x\nxx   \nENDMAP\n"
    (m,) = parse_des_text(text, ORIGIN)
    assert m.rows == ("  x.x", "xx   ")
    assert (m.width, m.height) == (5, 2)


def test_tiles_pad_short_rows_transparent():
    (m,) = parse_des_text("MAP\nxx.\nx\nENDMAP\n", ORIGIN)
    assert m.tiles() == [
        [WALL, WALL, FLOOR],
        [WALL, TRANSPARENT, TRANSPARENT],
    ]


def test_glyph_families():
    (m,) = parse_des_text("MAP\n<{>}cW+@ \nENDMAP\n", ORIGIN)
    assert m.tiles()[0] == [
        STAIRS_UP, STAIRS_UP, STAIRS_DOWN, STAIRS_DOWN, WALL, FLOOR, FLOOR, FLOOR, TRANSPARENT,
    ]


def test_empty_text_gives_no_maps():
    assert parse_des_text("", ORIGIN) == []


def test_library_loads_files_in_sorted_order(source_root):
    library = load_vault_library(source_root)
    assert [v.name for v in library] == ["small_grotto", "pillar_hall", "lair_pool", "orc_vault_gate"]
    by_name = {v.name: v for v in library}
    assert by_name["lair_pool"].relative_origin == "branches/lair.des"
    assert by_name["small_grotto"].relative_origin == "arrival.des"
    assert by_name["lair_pool"].place_hints == {"LAIR:1", "LAIR"}
    # file-level accumulation
    assert by_name["pillar_hall"].place_hints == {"D:2", "D:3", "D"}


def test_library_skips_undecodable_files(source_root):
    (source_root / "dat" / "des" / "broken.des").write_bytes(b"NAME: bad\nMAP\n\xff\xfe\nENDMAP\n")
    names = [v.name for v in load_vault_library(source_root)]
    assert "bad" not in names
    assert len(names) == 4


def test_library_missing_directory(empty_source_root):
    assert load_vault_library(empty_source_root) == ()
