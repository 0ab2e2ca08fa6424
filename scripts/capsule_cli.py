"""Command-line front end for the capsule codec.

Usage:
    python scripts/capsule_cli.py info
    python scripts/capsule_cli.py encode "Hello, Energetic Router!"
    python scripts/capsule_cli.py encode --hex 48656c6c6f --format block
    python scripts/capsule_cli.py decode "<printable capsule>"
    python scripts/capsule_cli.py energies "payload" > energies.json
    python scripts/capsule_cli.py recover energies.json
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import List, Optional

# Ensure project root is on path
_project_root = Path(__file__).parent.parent
if str(_project_root) not in sys.path:
    sys.path.insert(0, str(_project_root))

from pydantic import ValidationError

from capsulelab.capsule.block import CapsuleBlock
from capsulelab.capsule.codec import (
    block_to_digits,
    decode_capsule,
    decode_from_string,
    encode_capsule,
)
from capsulelab.capsule.alphabet import digits_to_string
from capsulelab.capsule.energy import make_energies, recover_capsule, to_energies
from capsulelab.capsule.errors import CapsuleError
from capsulelab.config import CapsuleConfig, load_capsule_config, load_settings
from capsulelab.utils.logs import configure_logging
from capsulelab.utils.repro import read_json

logger = logging.getLogger("capsulelab.cli")


def _payload(args: argparse.Namespace) -> bytes:
    if args.hex:
        return bytes.fromhex(args.input)
    return args.input.encode("utf-8")


def _read_arg_or_stdin(value: str) -> str:
    return sys.stdin.read().strip() if value == "-" else value


def _render_payload(data: bytes, as_hex: bool) -> str:
    if as_hex:
        return data.hex()
    try:
        return data.decode("utf-8")
    except UnicodeDecodeError:
        return data.hex()


def cmd_info(config: CapsuleConfig, args: argparse.Namespace) -> None:
    info = {
        "max_input_bytes": config.max_input_bytes,
        "block_size": config.block_size,
        "header_size": config.header_size,
        "region_size": config.region_size,
        "base": config.base,
        "digits_count": config.digits_count,
        "feistel_rounds": config.feistel_rounds,
        "normalization": config.normalization,
        "energy_base": config.energy_base,
    }
    print(json.dumps(info, indent=2))


def cmd_encode(config: CapsuleConfig, args: argparse.Namespace) -> None:
    block = encode_capsule(_payload(args), config)
    if args.format == "block":
        print(block.hex())
        return
    digits = block_to_digits(block, config)
    if args.format == "digits":
        print(json.dumps(digits))
    elif args.format == "energies":
        print(json.dumps(to_energies(digits, config.base).tolist()))
    else:
        print(digits_to_string(digits, config.alphabet))


def cmd_decode(config: CapsuleConfig, args: argparse.Namespace) -> None:
    text = _read_arg_or_stdin(args.input)
    if args.format == "block":
        data = decode_capsule(CapsuleBlock.fromhex(text, config.block_size), config)
    else:
        data = decode_from_string(text, config)
    print(_render_payload(data, args.hex_output))


def cmd_energies(config: CapsuleConfig, args: argparse.Namespace) -> None:
    batch, _ = make_energies(_payload(args), config)
    print(json.dumps(batch.to_dict()))


def cmd_recover(config: CapsuleConfig, args: argparse.Namespace) -> None:
    if args.source == "-":
        obj = json.loads(sys.stdin.read())
    else:
        obj = read_json(args.source)
    energies = obj["energies"] if isinstance(obj, dict) else obj
    data = recover_capsule(energies, config)
    print(_render_payload(data, args.hex_output))


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Reversible capsule codec: bytes <-> fixed block <-> base-B digits / energies",
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="Path to a JSON capsule config (default: environment / built-in defaults)",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Enable debug logging",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("info", help="Show the active capsule parameters")

    p = sub.add_parser("encode", help="Encode a payload")
    p.add_argument("input", help="Payload text (or hex with --hex)")
    p.add_argument("--hex", action="store_true", help="Treat input as hex bytes")
    p.add_argument(
        "--format", choices=["string", "digits", "energies", "block"], default="string",
        help="Output representation (default: string)",
    )

    p = sub.add_parser("decode", help="Decode a capsule back to its payload")
    p.add_argument("input", help="Printable capsule string, block hex, or '-' for stdin")
    p.add_argument("--format", choices=["string", "block"], default="string")
    p.add_argument("--hex-output", action="store_true", help="Print the payload as hex")

    p = sub.add_parser("energies", help="Encode a payload and print its energies as JSON")
    p.add_argument("input", help="Payload text (or hex with --hex)")
    p.add_argument("--hex", action="store_true", help="Treat input as hex bytes")

    p = sub.add_parser("recover", help="Recover a payload from a JSON energy vector")
    p.add_argument("source", help="JSON file with a list or {'energies': [...]}, or '-' for stdin")
    p.add_argument("--hex-output", action="store_true", help="Print the payload as hex")

    return parser


COMMANDS = {
    "info": cmd_info,
    "encode": cmd_encode,
    "decode": cmd_decode,
    "energies": cmd_energies,
    "recover": cmd_recover,
}


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    try:
        settings = load_settings()
        configure_logging(
            "DEBUG" if args.verbose else settings.log_level,
            settings.log_levels_override,
        )
        config = load_capsule_config(args.config) if args.config else settings.capsule
        COMMANDS[args.command](config, args)
    except ValidationError as e:
        logger.error("Invalid capsule configuration: %s", e)
        return 1
    except CapsuleError as e:
        logger.error("%s failed: %s", args.command, e)
        return 1
    except ValueError as e:
        logger.error("Invalid input for %s: %s", args.command, e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
