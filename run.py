"""levelpreview CLI entry point.

Provides subcommands for printing a simulated level, listing the vault
library and running the HTTP preview server. Accepts configuration via
flags and environment variables, with optional .env loading.

Run `python run.py --help` for details.
"""

import argparse
import json
import os
import sys
from textwrap import dedent

from colorama import Fore, Style
from colorama import init as _color_init
from dotenv import load_dotenv

_color_init()
_COLOR_ENABLED = True

# Disable colors if output is not a real terminal (e.g., during pytest capture)
try:
    if not sys.stdout.isatty():  # pragma: no cover - environment dependent
        _COLOR_ENABLED = False
except (AttributeError, ValueError):  # pragma: no cover
    _COLOR_ENABLED = False

COMMANDS = ("simulate", "vaults", "serve")
LEGEND = "# wall, . floor, < up stairs, > down stairs, * overlay marker"
_TILE_COLORS = {
    "#": Fore.WHITE,
    ".": "",
    "<": Fore.GREEN,
    ">": Fore.RED,
    "*": Fore.MAGENTA,
}


def _load_version() -> str:
    try:
        with open("VERSION", "r", encoding="utf-8") as f:
            return f.read().strip()
    except OSError:
        return "0.1.0"


__version__ = _load_version()


def parse_args(argv: list[str]) -> argparse.Namespace:
    description = """
    levelpreview: deterministic dungeon level previews

    Simulate a seeded dungeon level from a game source tree (map-definition
    files under dat/des, overlay scripts under dat/dlua) and print it, list
    the vault library, or serve previews over HTTP. Configuration can be
    provided via CLI flags or environment variables. If both are present,
    CLI flags take precedence.
    """

    epilog = dedent(
        """
        Environment variables:
          LEVELPREVIEW_SOURCE_ROOT  Game source root (default: crawl-ref/source)
          LEVELPREVIEW_DEPTH        Dungeon depth (default: 1)
          LEVELPREVIEW_SEED         Seed (default: 0)
          LEVELPREVIEW_WIDTH        Width (default: 100)
          LEVELPREVIEW_HEIGHT       Height (default: 100)
          LEVELPREVIEW_BRANCH       Branch code, e.g. Lair or Zot
          LEVELPREVIEW_MAP          Force a vault by name
          HOST / PORT               Bind address for `serve` (default: 0.0.0.0:5000)

        Examples:
          # Print depth 3 of the Lair with seed 42
          python run.py simulate --depth 3 --seed 42 --branch Lair

          # Machine-readable output
          python run.py simulate --seed 7 --width 60 --height 30 --json

          # List vaults that can appear in the Vaults branch
          python run.py vaults --branch Vaults

          # Load variables from .env then run the server
          python run.py --env-file .env serve --port 8080
        """
    )

    parser = argparse.ArgumentParser(
        prog="levelpreview",
        description=dedent(description),
        epilog=epilog,
        formatter_class=argparse.RawTextHelpFormatter,
    )

    parser.add_argument(
        "--env-file",
        dest="env_file",
        help="Path to a .env file to load before processing flags",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"levelpreview {__version__}",
    )

    subparsers = parser.add_subparsers(dest="command")

    # simulate subcommand
    sim_parser = subparsers.add_parser(
        "simulate",
        help="Simulate one level and print it",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Build a seeded level preview and print it with a header block",
    )
    sim_parser.add_argument("--depth", type=int, default=None, help="Dungeon depth (>= 1)")
    sim_parser.add_argument("--seed", type=int, default=None, help="Random seed")
    sim_parser.add_argument("--width", type=int, default=None, help="Level width (>= 5)")
    sim_parser.add_argument("--height", type=int, default=None, help="Level height (>= 5)")
    sim_parser.add_argument("--source-root", dest="source_root", default=None, help="Game source root")
    sim_parser.add_argument("--branch", default=None, help="Branch code (e.g. D, Lair, Zot)")
    sim_parser.add_argument("--map", dest="map_name", default=None, help="Force a vault by name")
    sim_parser.add_argument("--no-border", dest="no_border", action="store_true", help="Omit the box-drawing frame")
    sim_parser.add_argument("--json", dest="as_json", action="store_true", help="Print the preview payload as JSON")
    sim_parser.set_defaults(command="simulate")

    # vaults subcommand
    vault_parser = subparsers.add_parser(
        "vaults",
        help="List the vault library",
        formatter_class=argparse.RawTextHelpFormatter,
    )
    vault_parser.add_argument("--source-root", dest="source_root", default=None, help="Game source root")
    vault_parser.add_argument("--branch", default=None, help="Only vaults matching this branch code")
    vault_parser.set_defaults(command="vaults")

    # serve subcommand
    serve_parser = subparsers.add_parser(
        "serve",
        help="Run the HTTP preview server",
        formatter_class=argparse.RawTextHelpFormatter,
        description="Run the Flask preview API (/api/preview, /api/vaults)",
    )
    serve_parser.add_argument(
        "--host",
        default=None,
        help="Host interface to bind (default: env HOST or 0.0.0.0)",
    )
    serve_parser.add_argument(
        "--port",
        type=int,
        default=None,
        help="Port to listen on (default: env PORT or 5000)",
    )
    serve_parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable Flask debug mode with verbose error pages",
    )
    serve_parser.set_defaults(command="serve")

    args = parser.parse_args(_with_default_command(argv))
    return args


def _with_default_command(argv: list[str]) -> list[str]:
    """Insert `simulate` after the global flags when no subcommand was given."""
    i = 0
    while i < len(argv) and argv[i].startswith("--env-file"):
        i += 1 if "=" in argv[i] else 2
    if i < len(argv) and (argv[i] in COMMANDS or argv[i] in ("-h", "--help", "--version")):
        return list(argv)
    return list(argv[:i]) + ["simulate"] + list(argv[i:])


def label(text: str) -> str:
    return f"{Fore.YELLOW}{text}{Style.RESET_ALL}" if _COLOR_ENABLED else text


def value(val) -> str:
    return f"{Fore.GREEN}{val}{Style.RESET_ALL}" if _COLOR_ENABLED else str(val)


def colorize(text: str) -> str:
    if not _COLOR_ENABLED:
        return text
    return "".join(
        f"{_TILE_COLORS[ch]}{ch}{Style.RESET_ALL}" if _TILE_COLORS.get(ch) else ch for ch in text
    )


def _config_from_args(args):
    from levelpreview.dungeon import SimulationConfig

    return SimulationConfig.from_env(
        source_root=getattr(args, "source_root", None),
        depth=getattr(args, "depth", None),
        seed=getattr(args, "seed", None),
        width=getattr(args, "width", None),
        height=getattr(args, "height", None),
        branch=getattr(args, "branch", None),
        map_name=getattr(args, "map_name", None),
    )


def cmd_simulate(args) -> int:
    from levelpreview.dungeon import ConfigError, get_simulator

    try:
        config = _config_from_args(args)
    except ConfigError as e:
        print(f"[ERROR] {e}", file=sys.stderr)
        return 1
    result = get_simulator(config.source_root).simulate(config)
    border = not getattr(args, "no_border", False)
    if getattr(args, "as_json", False):
        print(json.dumps(result.to_dict(border), indent=2))
        return 0
    lines = [
        f"{label('Dungeon depth :')} {value(result.depth)}",
        f"{label('Seed          :')} {value(result.seed)}",
        f"{label('Layout        :')} {value(result.provenance)}",
        f"{label('Legend        :')} {LEGEND}",
        "",
        colorize(result.render(border)),
    ]
    print("\n".join(lines))
    return 0


def cmd_vaults(args) -> int:
    from levelpreview.dungeon import get_simulator
    from levelpreview.dungeon.config import DEFAULT_SOURCE_ROOT

    source_root = getattr(args, "source_root", None) or os.getenv("LEVELPREVIEW_SOURCE_ROOT", DEFAULT_SOURCE_ROOT)
    branch = (getattr(args, "branch", None) or "").strip()
    code = branch.split(":")[0].upper() or None
    library = [v for v in get_simulator(source_root).library if v.matches_branch(code)]
    for vault in library:
        hints = ",".join(sorted(vault.place_hints)) or "-"
        print(f"{value(vault.name):30} {vault.width:>3}x{vault.height:<3} {hints:20} {vault.relative_origin}")
    print(f"{len(library)} vault(s)")
    return 0


def cmd_serve(args) -> int:
    from levelpreview.dungeon.config import DEFAULT_SOURCE_ROOT
    from levelpreview.logging_utils import log
    from levelpreview.server import start_server

    host = getattr(args, "host", None) or os.getenv("HOST", "0.0.0.0")
    port = int(getattr(args, "port", None) or os.getenv("PORT", "5000"))
    debug = bool(getattr(args, "debug", False) or os.getenv("FLASK_DEBUG") == "1")
    source_root = os.getenv("LEVELPREVIEW_SOURCE_ROOT", DEFAULT_SOURCE_ROOT)

    divider = (Fore.MAGENTA + "=" * 40 + Style.RESET_ALL) if _COLOR_ENABLED else "=" * 40
    title = f"{Fore.CYAN}{Style.BRIGHT}Level Preview Server{Style.RESET_ALL}" if _COLOR_ENABLED else "Level Preview Server"
    print(
        "\n".join(
            [
                divider,
                f"  {title}",
                divider,
                f"  {label('Host:'):12} {value(host)}",
                f"  {label('Port:'):12} {value(port)}",
                f"  {label('Source:'):12} {value(source_root)}",
                divider,
                "",
            ]
        )
    )
    log.info(event="listen", host=host, port=port, debug=debug)
    start_server(host=host, port=port, debug=debug)
    return 0


def main(argv: list[str]) -> int:
    args = parse_args(argv)
    # Load .env before the package reads its environment on import
    if getattr(args, "env_file", None):
        load_dotenv(args.env_file, override=True)
    else:
        load_dotenv()

    mode = (getattr(args, "command", None) or "simulate").lower()
    if mode == "vaults":
        return cmd_vaults(args)
    if mode == "serve":
        return cmd_serve(args)
    return cmd_simulate(args)


if __name__ == "__main__":
    raise SystemExit(main(sys.argv[1:]))
