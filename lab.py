#!/usr/bin/env python3
"""
lab.py: render matotam artwork and metadata from the command line.

    python lab.py sigil addr_test1...
    python lab.py ornament addr_a addr_b --day 42 --out ornament.svg
    python lab.py bubble --sender A --receiver B --message "hi" --out bubble.svg
    python lab.py metadata --sender A --receiver B --message "hi" --policy-id <hex>
"""
import argparse
import logging
import sys
from datetime import datetime, timezone

from httpclient import BlockfrostClient
from mint import build_mint_metadata
from rarity import format_rarity_code, rarity_from_timestamp
from sigil_engine import derive_sigil_params, render_sigil, sigil_rating
from svg_bubble import compose_bubble, wrap_text
from swirl_engine import archetype_name, derive_ornament_params
from utils import short_hash, write_output

logger = logging.getLogger("matotam.lab")

ORNAMENT_PREVIEW_TEXT = "Ornament preview"


def cmd_sigil(args) -> str:
    params = derive_sigil_params(args.address)
    logger.info(f"Sigil for {short_hash(args.address)}: {params.ids()} ({sigil_rating(params)})")
    return render_sigil(params, size=args.size)


def cmd_ornament(args) -> str:
    params = derive_ornament_params(args.addr_a, args.addr_b, args.year, args.day)
    code = format_rarity_code(args.year, args.day)
    logger.info(f"Ornament archetype: {archetype_name(params)} (layers={params.layers})")
    return compose_bubble(wrap_text(ORNAMENT_PREVIEW_TEXT), code, params)


def cmd_bubble(args) -> str:
    rarity = rarity_from_timestamp(datetime.now(timezone.utc))
    ornament = derive_ornament_params(args.sender, args.receiver,
                                      rarity.project_year or 0, rarity.day_in_year or 0)
    sigil = derive_sigil_params(args.sender) if args.with_sigil else None
    return compose_bubble(wrap_text(args.message), rarity.code, ornament, sigil)


def cmd_metadata(args):
    indexer = None
    if args.seq is None and not args.offline:
        indexer = BlockfrostClient()
    result = build_mint_metadata(args.sender, args.receiver, args.message, args.policy_id,
                                 indexer=indexer, disambiguator=args.disambiguator,
                                 sequence=args.seq)
    logger.info(f"Unit {short_hash(result.unit)} quickBurnId {short_hash(result.quick_burn_id)}")
    return {"721": result.metadata}


def parse_args(argv=None):
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--out", type=str, default=None, help="Write output to this file instead of stdout")
    common.add_argument("-v", "--verbose", action="store_true", help="Debug logging")

    p = argparse.ArgumentParser(description="matotam artwork and metadata lab")
    sub = p.add_subparsers(dest="command", required=True)

    s = sub.add_parser("sigil", parents=[common], help="Render the sigil for an address")
    s.add_argument("address", type=str)
    s.add_argument("--size", type=int, default=64, help="Sigil viewBox size")
    s.set_defaults(func=cmd_sigil)

    o = sub.add_parser("ornament", parents=[common], help="Preview the ornament for an address pair")
    o.add_argument("addr_a", type=str)
    o.add_argument("addr_b", type=str)
    o.add_argument("--year", type=int, default=0)
    o.add_argument("--day", type=int, default=0)
    o.set_defaults(func=cmd_ornament)

    b = sub.add_parser("bubble", parents=[common], help="Render a message bubble")
    b.add_argument("--sender", type=str, required=True)
    b.add_argument("--receiver", type=str, required=True)
    b.add_argument("--message", type=str, required=True)
    b.add_argument("--no-sigil", dest="with_sigil", action="store_false", help="Leave the sender sigil out")
    b.set_defaults(func=cmd_bubble)

    m = sub.add_parser("metadata", parents=[common], help="Build the 721 metadata for a message")
    m.add_argument("--sender", type=str, required=True)
    m.add_argument("--receiver", type=str, required=True)
    m.add_argument("--message", type=str, required=True)
    m.add_argument("--policy-id", type=str, required=True)
    m.add_argument("--seq", type=int, default=None, help="Fixed thread index; skips the indexer lookup")
    m.add_argument("--offline", action="store_true", help="Never call the indexer")
    m.add_argument("--disambiguator", type=str, default=None, help="Fixed 4-hex asset name suffix")
    m.set_defaults(func=cmd_metadata)

    return p.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO,
                        format='%(asctime)s [%(levelname)s] %(message)s')
    output = args.func(args)
    text = write_output(output, args.out)
    if args.out:
        logger.info(f"Wrote {args.out}")
    else:
        sys.stdout.write(text + "\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())
