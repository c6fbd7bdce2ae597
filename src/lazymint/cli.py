"""lazymint CLI — off-chain tooling for issuers and allowlist maintainers.

Usage:
    python -m lazymint.cli root --addresses artists.txt
    python -m lazymint.cli proof --addresses artists.txt --target 0xAbc...
    python -m lazymint.cli verify --root 0x... --target 0xAbc... --proof '["0x..."]'
    python -m lazymint.cli sign-voucher --asset-id 1 --min-price 10 --uri test/1
    python -m lazymint.cli recover --asset-id 1 --min-price 10 --uri test/1 --signature 0x...
    python -m lazymint.cli anchor-root --root 0x...

Address files hold one address per line (blank lines and # comments
ignored) or a JSON array. Private keys are never passed on the command
line: they are read from an environment variable, optionally loaded
from a .env file.
"""

from __future__ import annotations

import argparse
import json
import logging
import os
import sys
from dataclasses import asdict
from pathlib import Path

from dotenv import load_dotenv

from lazymint.config import RegistryConfig
from lazymint.crypto.anchor import anchor_root
from lazymint.crypto.merkle import AllowlistTree, verify_proof
from lazymint.crypto.voucher import recover_signer, sign_voucher, voucher_domain
from lazymint.errors import InvalidSignature
from lazymint.models.registry import Voucher


DEFAULT_CONFIG = Path(__file__).resolve().parents[2] / "config" / "registry.json"
DEFAULT_KEY_ENV = "LAZYMINT_ISSUER_KEY"


def read_addresses(path: Path) -> list[str]:
    """Read an address list from a text or JSON file."""
    text = path.read_text(encoding="utf-8")
    if text.lstrip().startswith("["):
        data = json.loads(text)
        if not all(isinstance(a, str) for a in data):
            raise ValueError(f"Address array must contain strings: {path}")
        return data
    addresses: list[str] = []
    for line in text.splitlines():
        line = line.split("#", 1)[0].strip()
        if line:
            addresses.append(line)
    return addresses


def _domain(args: argparse.Namespace) -> dict:
    config = RegistryConfig.from_file(args.config)
    return voucher_domain(
        config.chain_id,
        config.contract_address,
        name=config.domain_name,
        version=config.domain_version,
    )


def _voucher(args: argparse.Namespace) -> Voucher:
    return Voucher(asset_id=args.asset_id, min_price=args.min_price, uri=args.uri)


def cmd_root(args: argparse.Namespace) -> int:
    tree = AllowlistTree(read_addresses(args.addresses))
    print(tree.root)
    return 0


def cmd_proof(args: argparse.Namespace) -> int:
    tree = AllowlistTree(read_addresses(args.addresses))
    if args.target not in tree:
        print(f"Failed: {args.target} is not in the allowlist", file=sys.stderr)
        return 1
    print(json.dumps({"root": tree.root, "proof": tree.proof(args.target)}, indent=2))
    return 0


def cmd_verify(args: argparse.Namespace) -> int:
    proof = json.loads(args.proof)
    if not isinstance(proof, list):
        raise ValueError("--proof must be a JSON array of hashes")
    if verify_proof(args.root, args.target, proof):
        print("valid")
        return 0
    print("invalid", file=sys.stderr)
    return 1


def cmd_sign_voucher(args: argparse.Namespace) -> int:
    if args.env_file is not None:
        load_dotenv(args.env_file)
    private_key = os.getenv(args.key_env)
    if not private_key:
        print(f"Failed: {args.key_env} is not set", file=sys.stderr)
        return 1
    signature = sign_voucher(private_key, _voucher(args), _domain(args))
    print("0x" + signature.hex())
    return 0


def cmd_recover(args: argparse.Namespace) -> int:
    try:
        signer = recover_signer(_voucher(args), args.signature, _domain(args))
    except InvalidSignature as exc:
        print(f"Failed: {exc.reason}", file=sys.stderr)
        return 1
    print(signer)
    return 0


def cmd_anchor_root(args: argparse.Namespace) -> int:
    if args.env_file is not None:
        load_dotenv(args.env_file)
    rpc_url = os.getenv("LAZYMINT_RPC_URL")
    private_key = os.getenv(args.key_env)
    if not rpc_url or not private_key:
        print(f"Failed: LAZYMINT_RPC_URL and {args.key_env} must be set", file=sys.stderr)
        return 1
    record = anchor_root(args.root, rpc_url, private_key, chain_id=args.chain_id)
    print(json.dumps(asdict(record), indent=2))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="lazymint",
        description="lazymint — voucher and allowlist tooling",
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=DEFAULT_CONFIG,
        help="Path to registry config JSON (default: config/registry.json)",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable info logging")
    sub = parser.add_subparsers(dest="command")

    # root
    p_root = sub.add_parser("root", help="Compute the allowlist Merkle root")
    p_root.add_argument("--addresses", type=Path, required=True, help="Address list file")

    # proof
    p_proof = sub.add_parser("proof", help="Generate an allowlist proof")
    p_proof.add_argument("--addresses", type=Path, required=True, help="Address list file")
    p_proof.add_argument("--target", required=True, help="Address to prove")

    # verify
    p_verify = sub.add_parser("verify", help="Verify an allowlist proof")
    p_verify.add_argument("--root", required=True, help="Merkle root (0x hex)")
    p_verify.add_argument("--target", required=True, help="Claimed member address")
    p_verify.add_argument("--proof", required=True, help="Proof as a JSON array")

    # sign-voucher / recover share voucher fields
    for name, help_text in (
        ("sign-voucher", "Sign a voucher as an issuer"),
        ("recover", "Recover the signer of a voucher"),
    ):
        p = sub.add_parser(name, help=help_text)
        p.add_argument("--asset-id", type=int, required=True, help="Asset (token) id")
        p.add_argument("--min-price", type=int, required=True, help="Minimum price in wei")
        p.add_argument("--uri", required=True, help="Metadata URI suffix")
        if name == "sign-voucher":
            p.add_argument("--key-env", default=DEFAULT_KEY_ENV, help="Env var holding the private key")
            p.add_argument("--env-file", type=Path, help="Optional .env file to load")
        else:
            p.add_argument("--signature", required=True, help="Signature (0x hex)")

    # anchor-root
    p_anchor = sub.add_parser("anchor-root", help="Anchor a Merkle root on chain")
    p_anchor.add_argument("--root", required=True, help="Merkle root (0x hex)")
    p_anchor.add_argument("--chain-id", type=int, default=11155111, help="Chain id (default: Sepolia)")
    p_anchor.add_argument("--key-env", default=DEFAULT_KEY_ENV, help="Env var holding the private key")
    p_anchor.add_argument("--env-file", type=Path, help="Optional .env file to load")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if args.command is None:
        parser.print_help()
        return 0

    commands = {
        "root": cmd_root,
        "proof": cmd_proof,
        "verify": cmd_verify,
        "sign-voucher": cmd_sign_voucher,
        "recover": cmd_recover,
        "anchor-root": cmd_anchor_root,
    }

    handler = commands.get(args.command)
    if handler is None:
        print(f"Unknown command: {args.command}", file=sys.stderr)
        return 1

    try:
        return handler(args)
    except ValueError as exc:
        print(f"Failed: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
