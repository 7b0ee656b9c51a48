"""Command-line viewer for Minecraft player data files.

``show`` decodes a player ``.dat`` file and prints a summary, optionally after
resolving the player's name and skin on the session server. ``dump`` prints
every tag in the file so unexpected layouts can be inspected.
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import Optional, Sequence, TextIO

from playerdata import Player, ProfileError, ProfileResolver, ResolverSettings, StructuralError
from playerdata.tags import format_path, format_value, kind_name, load_document, walk

EXIT_OK = 0
EXIT_DECODE_FAILED = 1
EXIT_PROFILE_FAILED = 2
EXIT_CONFIG_INVALID = 3


def format_player(player: Player) -> str:
    lines = [
        f"Name:       {player.name or '(unresolved)'}",
        f"UUID:       {player.uuid}",
        f"Skin:       {player.skin_url or '(none)'}",
        f"Dimension:  {player.dimension.value}",
        "Position:   {:.2f}, {:.2f}, {:.2f}".format(*player.position),
        "Spawn:      " + (", ".join(str(v) for v in player.spawn) if player.spawn else "(no bed spawn)"),
        f"Health:     {player.health}",
        f"Food:       {player.food}",
        f"Air:        {player.air}",
        f"XP:         level {player.xp_level} ({player.xp_total} total)",
        f"Inventory:  {len(player.inventory)} stacks",
    ]
    for item in player.inventory:
        lines.append(f"  {item.slot_name:<12} id {item.item_id}:{item.damage} ×{item.count}")
    return "\n".join(lines)


def show(args: argparse.Namespace, out: TextIO) -> int:
    settings = None
    if args.resolve:
        try:
            settings = ResolverSettings.from_env()
        except ValueError as exc:
            print(f"Invalid configuration: {exc}", file=sys.stderr)
            return EXIT_CONFIG_INVALID

    try:
        player = Player.from_file(args.path)
    except (OSError, StructuralError) as exc:
        print(f"Failed to open {args.path}: {exc}", file=sys.stderr)
        return EXIT_DECODE_FAILED

    status = EXIT_OK
    if settings is not None:
        with ProfileResolver(settings) as resolver:
            try:
                player = resolver.resolve(player)
            except ProfileError as exc:
                print(f"Profile lookup failed: {exc}", file=sys.stderr)
                status = EXIT_PROFILE_FAILED

    if args.json:
        print(json.dumps(player.to_dict(), indent=2), file=out)
    else:
        print(format_player(player), file=out)
    return status


def dump(args: argparse.Namespace, out: TextIO) -> int:
    try:
        root_name, root = load_document(args.path)
    except (OSError, StructuralError) as exc:
        print(f"Failed to open {args.path}: {exc}", file=sys.stderr)
        return EXIT_DECODE_FAILED

    print(f"{root_name or '(root)'}  Compound  {format_value(root)}", file=out)
    for path, tag in walk(root):
        print(f"{format_path(path)}  {kind_name(tag)}  {format_value(tag)}", file=out)
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Inspect Minecraft player data files.")
    parser.add_argument("--log-level", default="WARNING", help="Logging level (DEBUG, INFO, WARNING, ERROR)")
    subparsers = parser.add_subparsers(dest="command", required=True)

    show_parser = subparsers.add_parser("show", help="Decode a player file and print a summary")
    show_parser.add_argument("path", help="Player .dat file")
    show_parser.add_argument("--resolve", action="store_true", help="Look up name and skin on the session server")
    show_parser.add_argument("--json", action="store_true", help="Print the player as JSON")
    show_parser.set_defaults(handler=show)

    dump_parser = subparsers.add_parser("dump", help="Print every tag in the file")
    dump_parser.add_argument("path", help="NBT file")
    dump_parser.set_defaults(handler=dump)
    return parser


def main(argv: Optional[Sequence[str]] = None, out: Optional[TextIO] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level.upper(), logging.WARNING),
        format="%(levelname)s: %(message)s",
    )
    return args.handler(args, out or sys.stdout)


if __name__ == "__main__":
    sys.exit(main())
