"""
Operator utilities.

    python -m credvault generate-key
    python -m credvault master-password
    python -m credvault generate-password --length 24
"""
import sys
import getpass
import argparse
import logging
from typing import Optional

from .conf import generate_encryption_key
from .strength import PasswordStrengthEngine
from .vault.master_lock import MasterLock


def cmd_generate_key(args: argparse.Namespace) -> int:
    print(f"VAULT_ENCRYPTION_KEY={generate_encryption_key()}")
    return 0


def cmd_master_password(args: argparse.Namespace) -> int:
    """Prompt for a master password and print the pre-provisioned lock pair."""
    lock = MasterLock(min_length=args.min_length)
    password = getpass.getpass("Enter your master password: ")
    if len(password) < args.min_length:
        print(
            f"Error: Password must be at least {args.min_length} characters long",
            file=sys.stderr,
        )
        return 1
    confirm = getpass.getpass("Confirm your master password: ")
    if password != confirm:
        print("Error: Passwords do not match", file=sys.stderr)
        return 1

    state = lock.setup(password)
    print("Add these to your environment:\n")
    print(f"MASTER_PASSWORD_HASH={state.digest}")
    print(f"MASTER_PASSWORD_SALT={state.salt}")
    print("\nThe master password cannot be recovered if lost.")
    return 0


def cmd_generate_password(args: argparse.Namespace) -> int:
    engine = PasswordStrengthEngine()
    try:
        password = engine.generate(args.length, include_special=not args.no_special)
    except ValueError as err:
        print(f"Error: {err}", file=sys.stderr)
        return 1
    score = engine.score(password)
    print(password)
    print(f"strength: {score} ({engine.label(score)})", file=sys.stderr)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="credvault", description="Credvault operator utilities"
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = parser.add_subparsers(dest="command", required=True)

    p = sub.add_parser("generate-key", help="generate a field encryption key")
    p.set_defaults(func=cmd_generate_key)

    p = sub.add_parser("master-password", help="provision the master lock")
    p.add_argument("--min-length", type=int, default=8)
    p.set_defaults(func=cmd_master_password)

    p = sub.add_parser("generate-password", help="generate a random password")
    p.add_argument("--length", type=int, default=16)
    p.add_argument("--no-special", action="store_true", help="letters and digits only")
    p.set_defaults(func=cmd_generate_password)
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(name)s %(levelname)s %(message)s",
    )
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
