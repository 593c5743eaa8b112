# tests/test_cli.py
from __future__ import annotations

import json

import pytest

import cli
from dca.client import TICKER_PATH, KrakenClient
from dca.errors import OrderTooSmallError
from dca.models import OrderResult, PlacementResult
from tests.fakes import FakeSession, ticker_body


def write_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text(json.dumps({"krakenApiKey": "k", "krakenPrivateKey": "c2VjcmV0", "orderAmountInCents": 2500}))
    return str(path)


def test_parser_buy_flags():
    args = cli.build_parser().parse_args(["buy", "--config", "c.json", "--amount", "100", "--yes"])
    assert args.config == "c.json"
    assert args.amount == "100"
    assert args.yes is True
    assert args.func is cli.cmd_buy


def test_buy_runs_with_amount_override(tmp_path, monkeypatch):
    seen = {}

    def fake_run(config, build_info, client=None):
        seen["amount"] = config.order_amount_in_cents
        return OrderResult(volume=0.002, placement=PlacementResult("TX-1", "buy 0.002 XBTUSD @ market"))

    monkeypatch.setattr(cli, "run", fake_run)
    args = cli.build_parser().parse_args(["buy", "-c", write_config(tmp_path), "-a", "10000", "-y"])
    cli.cmd_buy(args, cli.BuildInfo())

    assert seen["amount"] == 10000


def test_buy_exits_on_rejection(tmp_path, monkeypatch):
    def fake_run(config, build_info, client=None):
        raise OrderTooSmallError("EGeneral:Invalid arguments:volume minimum not met")

    monkeypatch.setattr(cli, "run", fake_run)
    args = cli.build_parser().parse_args(["buy", "-c", write_config(tmp_path), "-y"])
    with pytest.raises(SystemExit) as info:
        cli.cmd_buy(args, cli.BuildInfo())
    assert info.value.code == 1


def test_buy_exits_on_bad_config(tmp_path):
    args = cli.build_parser().parse_args(["buy", "-c", str(tmp_path / "missing.json"), "-y"])
    with pytest.raises(SystemExit):
        cli.cmd_buy(args, cli.BuildInfo())


def test_quote_uses_public_client(monkeypatch, capsys):
    session = FakeSession().add(TICKER_PATH, ticker_body("50000.0"))
    monkeypatch.setattr(cli, "KrakenClient", lambda: KrakenClient(session=session))

    args = cli.build_parser().parse_args(["quote", "--amount", "10000"])
    cli.cmd_quote(args, cli.BuildInfo())

    assert "0.002" in capsys.readouterr().out
    assert "API-Key" not in session.calls[0]["headers"]
