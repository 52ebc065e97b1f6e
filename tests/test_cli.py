from __future__ import annotations

import io

import pytest

from unicast.addressing import AddressTable
from unicast.cli import build_parser, handle_command, main
from unicast.messages import load_messages
from unicast.service import ServiceUser


class RecordingTransport:
    def __init__(self) -> None:
        self.sent = []

    def send(self, dest_id, payload):
        self.sent.append((dest_id, payload))


@pytest.fixture
def shell():
    transport = RecordingTransport()
    user = ServiceUser(0, transport)
    table = AddressTable.from_lines(["0 localhost 1149", "1 localhost 1150"])
    out = io.StringIO()

    def run(line: str) -> bool:
        return handle_command(line, user=user, table=table, messages=load_messages(), out=out)

    return run, transport, out


def test_send_command(shell):
    run, transport, out = shell
    assert run("send 1 hello there") is True
    assert transport.sent == [(1, "hello there")]
    assert "Sent to 1: hello there" in out.getvalue()


def test_send_usage(shell):
    run, transport, out = shell
    run("send 1")
    assert "Usage: send" in out.getvalue()
    assert transport.sent == []


def test_send_bad_id(shell):
    run, transport, out = shell
    run("send one hi")
    assert "Invalid destination id: one" in out.getvalue()


def test_whoami_and_peers(shell):
    run, _, out = shell
    run("whoami")
    run("peers")
    text = out.getvalue()
    assert "I am node 0" in text
    assert "0  localhost:1149  (self)" in text
    assert "1  localhost:1150" in text


def test_quit(shell):
    run, _, _ = shell
    assert run("QUIT") is False
    assert run("exit") is False


def test_unknown_command_prints_help(shell):
    run, _, out = shell
    run("dance")
    assert "Unknown command." in out.getvalue()
    assert "Commands:" in out.getvalue()


def test_parser_requires_self():
    with pytest.raises(SystemExit) as ei:
        build_parser().parse_args([])
    assert ei.value.code == 2


def test_main_invalid_self():
    assert main(["--self", "abc"], stdin=io.StringIO(), out=io.StringIO()) == 2


def test_main_missing_config(tmp_path, capsys):
    rc = main(["--self", "0", "--config", str(tmp_path / "none.conf")], stdin=io.StringIO(), out=io.StringIO())
    assert rc == 1
    assert "Failed to start" in capsys.readouterr().err


def test_main_session(tmp_path, ports):
    conf = tmp_path / "up.conf"
    conf.write_text(f"0 localhost {ports[0]}\n1 localhost {ports[1]}\n", encoding="utf-8")
    stdin = io.StringIO("whoami\nsend 7 nobody\nsend 1 note for one\nquit\n")
    out = io.StringIO()
    assert main(["--self", "0", "--config", str(conf), "--lang", "pt"], stdin=stdin, out=out) == 0
    text = out.getvalue()
    assert "Eu sou o nó 0" in text
    assert "Falha no envio" in text
    assert "Enviado para 1: note for one" in text
    assert text.rstrip().endswith("Tchau.")


def test_send_rejects_non_plain_id(shell):
    run, transport, out = shell
    run("send 1_0 hi")
    assert "Invalid destination id: 1_0" in out.getvalue()
    assert transport.sent == []


@pytest.mark.parametrize("self_id", ["1_0", "١", "-1", "40000"])
def test_main_rejects_self_id(self_id):
    assert main(["--self", self_id], stdin=io.StringIO(), out=io.StringIO()) == 2
