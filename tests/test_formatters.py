"""Tests for sale info formatters."""

import json

from scm_ico.core.types import WEI_PER_ETHER as ETHER
from scm_ico.output.formatters import JSONFormatter, TableFormatter, format_timestamp


class TestJSONFormatter:
    def test_includes_state_code(self, ico, addr1):
        ico.fund(addr1, 10 * ETHER)

        data = json.loads(JSONFormatter().format(ico.info()))

        assert data["state"] == "closed"
        assert data["state_code"] == 1
        assert data["raised"] == 10 * ETHER
        assert data["left_eth"] == 0
        assert data["finish_time"] == data["close_time"] + 120

    def test_write_to_file(self, ico, tmp_path):
        path = tmp_path / "info.json"

        JSONFormatter().format_to_file(ico.info(), str(path))

        assert json.loads(path.read_text())["state_code"] == 0


class TestTableFormatter:
    def test_ongoing_sale(self, ico):
        text = TableFormatter().format(ico.info())

        assert "Ongoing" in text
        assert "10 ETH" in text
        assert "100 SCM" in text
        assert "Close time" not in text

    def test_closed_sale_shows_times(self, ico, addr1):
        ico.fund(addr1, 10 * ETHER)

        text = TableFormatter().format(ico.info())

        assert "Closed" in text
        assert "Close time" in text
        assert "Finish time" in text


def test_format_timestamp_handles_missing():
    assert format_timestamp(None) == "-"
    assert format_timestamp(0).startswith("19")
