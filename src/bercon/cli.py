from __future__ import annotations

import argparse
import logging
import sys
from typing import Iterable

from .client import RconClient
from .config import load_password
from .constants import CONFIG_FILE_NAME, DEFAULT_TIMEOUT_MS
from .errors import RconError
from .net import UdpEndpoint

EXIT_WORDS = ("exit", "quit")


def read_commands(prompt: str = "> ") -> Iterable[str]:
    while True:
        try:
            line = input(prompt)
        except EOFError:
            return
        line = line.strip()
        if not line:
            continue
        if line in EXIT_WORDS:
            return
        yield line


def run(args: argparse.Namespace) -> int:
    password = load_password(args.config)

    def echo_notice(text: str) -> None:
        if not args.quiet:
            print(text)

    with UdpEndpoint.connect(args.host, args.port) as udp:
        client = RconClient(udp, timeout_ms=args.timeout_ms)
        client.login(password)

        if args.interactive:
            if not args.quiet:
                print("Type 'exit' or 'quit' to exit interactive mode.")
            commands: Iterable[str] = read_commands()
        else:
            commands = [" ".join(args.command)]

        for command in commands:
            print(client.execute(command, on_notice=echo_notice))
    return 0


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="bercon", description="Remote console client for BattlEye RCon over UDP.")
    p.add_argument("-i", "--interactive", action="store_true", help="read commands from stdin")
    p.add_argument("-q", "--quiet", action="store_true", help="no extra client side output")
    p.add_argument("--config", default=CONFIG_FILE_NAME, help="file holding the RCon password")
    p.add_argument("--timeout-ms", type=int, default=DEFAULT_TIMEOUT_MS)
    p.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"])
    p.add_argument("host")
    p.add_argument("port", type=int)
    p.add_argument("command", nargs="*")
    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.interactive and not args.command:
        parser.error("a command is required unless -i is given")

    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")
    try:
        return run(args)
    except RconError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    raise SystemExit(main())
