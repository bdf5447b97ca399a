from __future__ import annotations

import json
import logging

import pytest

from linkcrawler import cli
from linkcrawler.config import CrawlConfig
from linkcrawler.core import TRACE, CrawlState


@pytest.fixture
def no_logging_setup(monkeypatch):
    monkeypatch.setattr(cli, "setup_logging", lambda verbosity: None)


@pytest.fixture
def fake_crawl(monkeypatch):
    calls = []

    def run(config):
        calls.append(config)
        state = CrawlState.from_seed(config.entrypoint)
        state.queue("/a")
        state.queue("/a")
        state.record_status("https://example.com/", 200)
        return state

    monkeypatch.setattr(cli, "crawl", run)
    return calls


def test_parse_args_defaults():
    args = cli.parse_args(["https://example.com"])
    assert args.entrypoint == "https://example.com"
    assert args.restrict_on_domain is False
    assert args.limit == 0
    assert args.verbose == 0
    assert args.workers == 5
    assert args.out == "-"


def test_parse_args_short_flags():
    args = cli.parse_args(["https://example.com", "-r", "-l", "10", "-vvv", "-w", "2"])
    assert args.restrict_on_domain is True
    assert args.limit == 10
    assert args.verbose == 3
    assert args.workers == 2


@pytest.mark.parametrize(
    "verbosity, level",
    [(0, logging.ERROR), (1, logging.INFO), (2, logging.DEBUG), (3, TRACE), (7, TRACE)],
)
def test_verbosity_level(verbosity, level):
    assert cli.verbosity_level(verbosity) == level


def test_setup_logging_configures_root():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        cli.setup_logging(1)
        assert root.level == logging.INFO
        assert len(root.handlers) == 1
        assert logging.getLogger("urllib3").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
        logging.getLogger("urllib3").setLevel(logging.NOTSET)


def test_main_prints_report(no_logging_setup, fake_crawl, capsys):
    assert cli.main(["https://example.com", "-r", "-l", "5"]) == 0

    assert fake_crawl == [CrawlConfig(entrypoint="https://example.com", restrict_on_domain=True, limit=5)]
    report = json.loads(capsys.readouterr().out)
    assert report == {
        "https://example.com/": {"count": 1, "status": 200},
        "https://example.com/a": {"count": 2, "status": 0},
    }


def test_main_writes_report_file(no_logging_setup, fake_crawl, tmp_path):
    out = tmp_path / "reports" / "crawl.json"
    assert cli.main(["https://example.com", "--out", str(out), "--pretty"]) == 0

    text = out.read_text(encoding="utf-8")
    assert text.startswith("{\n  ")
    assert json.loads(text)["https://example.com/a"]["count"] == 2


def test_main_invalid_seed_exits_before_crawling(no_logging_setup, caplog):
    caplog.set_level(logging.CRITICAL)
    assert cli.main(["not a url"]) == 2
    assert "Invalid start URL" in caplog.text


@pytest.mark.parametrize("option", [["-w", "0"], ["-l", "-1"], ["--timeout", "0"]])
def test_main_invalid_options(no_logging_setup, fake_crawl, option):
    assert cli.main(["https://example.com", *option]) == 2
    assert fake_crawl == []
