from __future__ import annotations

import argparse
import logging
import sys
from typing import Optional, TextIO

from .addressing import AddressTable, parse_int
from .constants import DEFAULT_CONFIG_RESOURCE, NODE_ID_MAX
from .errors import UnicastError
from .messages import Language, Messages, load_messages
from .protocol import UnicastProtocol
from .service import ServiceUser

PROMPT = "> "


def handle_command(
    line: str,
    *,
    user: ServiceUser,
    table: AddressTable,
    messages: Messages,
    out: TextIO,
) -> bool:
    """Run one shell command. Returns False when the shell should exit."""
    line = line.strip()
    if not line:
        return True

    cmd, _, rest = line.partition(" ")
    cmd = cmd.lower()

    if cmd in ("quit", "exit"):
        return False
    if cmd == "help":
        print(messages.get("helpText"), file=out)
    elif cmd == "whoami":
        print(messages.format("whoAmI", user.self_id), file=out)
    elif cmd == "peers":
        print(messages.get("peersHeader"), file=out)
        for node_id, endpoint in sorted(table.items()):
            marker = messages.get("selfMarker") if node_id == user.self_id else ""
            print(messages.format("peerLine", node_id, endpoint, marker), file=out)
    elif cmd == "send":
        dest_s, _, text = rest.strip().partition(" ")
        if not dest_s or not text:
            print(messages.get("sendUsage"), file=out)
            return True
        try:
            dest = parse_int(dest_s)
        except ValueError:
            print(messages.format("destInvalid", dest_s), file=out)
            return True
        try:
            user.send(dest, text)
        except (UnicastError, RuntimeError) as exc:
            print(messages.format("sendFailed", exc), file=out)
            return True
        print(messages.format("sendConfirm", dest, text), file=out)
    else:
        print(messages.get("unknownCommand"), file=out)
        print(file=out)
        print(messages.get("helpText"), file=out)
    return True


def run_shell(
    *,
    user: ServiceUser,
    table: AddressTable,
    messages: Messages,
    stdin: TextIO,
    out: TextIO,
) -> None:
    print(PROMPT, end="", file=out, flush=True)
    for line in stdin:
        if not handle_command(line, user=user, table=table, messages=messages, out=out):
            return
        print(PROMPT, end="", file=out, flush=True)


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="unicast", description="Unicast UDP messaging between numbered nodes.")
    p.add_argument("--self", dest="self_id", required=True, help="node id of this process")
    p.add_argument(
        "--config",
        default=None,
        help=f"address table file (default: packaged {DEFAULT_CONFIG_RESOURCE})",
    )
    p.add_argument("--lang", default="en", choices=[lang.value for lang in Language])
    p.add_argument(
        "--log-level",
        default="WARNING",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
    )
    return p


def main(
    argv: list[str] | None = None,
    stdin: Optional[TextIO] = None,
    out: Optional[TextIO] = None,
) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format="%(asctime)s [%(levelname)s] %(message)s")
    stdin = stdin or sys.stdin
    out = out or sys.stdout
    messages = load_messages(args.lang)

    try:
        self_id = parse_int(args.self_id)
    except ValueError:
        self_id = -1
    if not 0 <= self_id <= NODE_ID_MAX:
        print(messages.get("selfIdInvalid"), file=sys.stderr)
        return 2

    def show(origin_id: int, payload: str) -> None:
        print(f"\n{messages.format('received', origin_id, payload)}", file=out)
        print(PROMPT, end="", file=out, flush=True)

    user = ServiceUser(self_id, handler=show)
    try:
        if args.config:
            up = UnicastProtocol.from_config(args.config, self_id, user)
        else:
            up = UnicastProtocol.from_resource(DEFAULT_CONFIG_RESOURCE, self_id, user)
    except UnicastError as exc:
        print(messages.format("failedToStart", exc), file=sys.stderr)
        return 1
    user.bind(up)

    try:
        print(messages.format("started", self_id, args.config or DEFAULT_CONFIG_RESOURCE), file=out)
        print(messages.get("helpText"), file=out)
        run_shell(user=user, table=up.table, messages=messages, stdin=stdin, out=out)
    except KeyboardInterrupt:
        print(file=out)
        print(messages.get("shuttingDown"), file=out)
    finally:
        up.close()

    print(messages.get("goodbye"), file=out)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
