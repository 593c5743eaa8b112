# tests/test_app.py
from __future__ import annotations

import logging

import pytest

from dca import app, handler
from dca.client import ADD_ORDER_PATH, QUERY_ORDERS_PATH, TICKER_PATH, KrakenClient
from dca.config import AppConfig
from dca.errors import ConfigError, InvalidAuthError, ValidationError
from dca.models import BuildInfo
from dca.signing import CountingNonceSequencer
from tests.fakes import FakeSession, add_order_body, query_orders_body, ticker_body

CONFIG = AppConfig(kraken_api_key="key", kraken_private_key=b"secret", order_amount_in_cents=10000)
BUILD = BuildInfo(version="1.2.3", commit="abc123", date="2026-01-01")


def make_client(session: FakeSession) -> KrakenClient:
    return KrakenClient("key", b"secret", nonces=CountingNonceSequencer(1), session=session)


def test_run_places_order_and_logs_build_info(caplog):
    session = (
        FakeSession()
        .add(TICKER_PATH, ticker_body())
        .add(ADD_ORDER_PATH, add_order_body("TX-1"))
        .add(QUERY_ORDERS_PATH, query_orders_body("TX-1"))
    )
    with caplog.at_level(logging.INFO, logger="dca"):
        result = app.run(CONFIG, BUILD, client=make_client(session))

    assert result.placement.transaction_id == "TX-1"
    assert "version=1.2.3 commit=abc123" in caplog.text


def test_run_disables_logging_when_configured():
    dca_logger = logging.getLogger("dca")
    previous = dca_logger.level
    session = FakeSession().add(TICKER_PATH, ticker_body()).add(ADD_ORDER_PATH, add_order_body())
    config = AppConfig("key", b"secret", 10000, enable_logging=False, query_order_info=False)

    try:
        result = app.run(config, BUILD, client=make_client(session))
        assert not logging.getLogger("dca.client").isEnabledFor(logging.CRITICAL)
    finally:
        dca_logger.setLevel(previous)

    assert result.info is None


def test_build_info_is_immutable():
    with pytest.raises(AttributeError):
        BUILD.version = "changed"


def test_build_info_current_reads_environment(monkeypatch):
    monkeypatch.setenv("DCA_COMMIT", "deadbeef")
    monkeypatch.setenv("DCA_BUILD_DATE", "2026-10-19")
    info = BuildInfo.current()
    assert info.commit == "deadbeef"
    assert info.date == "2026-10-19"


def test_handler_requires_config_file(monkeypatch):
    monkeypatch.delenv("CONFIG_FILE", raising=False)
    with pytest.raises(ConfigError):
        handler.handle_request({"detail-type": "Scheduled Event"})


def test_handler_runs_purchase(monkeypatch):
    seen = {}
    monkeypatch.setenv("CONFIG_FILE", "/etc/dca/config.json")
    monkeypatch.setattr(handler, "load_config", lambda path: seen.setdefault("path", path) and CONFIG)
    monkeypatch.setattr(handler, "run", lambda config, build_info: seen.setdefault("config", config))

    assert handler.handle_request({}) == "Successfully processed messages"
    assert seen == {"path": "/etc/dca/config.json", "config": CONFIG}


def test_handler_propagates_failures(monkeypatch):
    def failing_run(config, build_info):
        raise InvalidAuthError("EAPI:Invalid key")

    monkeypatch.setenv("CONFIG_FILE", "config.json")
    monkeypatch.setattr(handler, "load_config", lambda path: CONFIG)
    monkeypatch.setattr(handler, "run", failing_run)

    with pytest.raises(InvalidAuthError):
        handler.handle_request({})


def test_run_rejects_non_positive_amount_before_any_request():
    session = FakeSession()
    config = AppConfig("key", b"secret", 0)
    with pytest.raises(ValidationError):
        app.run(config, BUILD, client=make_client(session))
    assert session.calls == []
