"""Tests for vidshare.common.logging: correlation IDs and structlog configuration."""

import json

import structlog

from vidshare.common.logging import (
    add_correlation_id,
    configure_logging,
    correlation_id_var,
    get_correlation_id,
    set_correlation_id,
)


class TestCorrelationId:
    def test_set_and_get(self):
        cid = set_correlation_id("test-123")
        assert cid == "test-123"
        assert get_correlation_id() == "test-123"

    def test_auto_generate(self):
        cid = set_correlation_id()
        assert len(cid) == 16
        assert get_correlation_id() == cid

    def test_default_empty(self):
        token = correlation_id_var.set("")
        try:
            assert get_correlation_id() == ""
        finally:
            correlation_id_var.reset(token)


class TestAddCorrelationId:
    def test_adds_when_set(self):
        token = correlation_id_var.set("abc")
        try:
            assert add_correlation_id(None, "info", {"event": "x"}) == {"event": "x", "correlation_id": "abc"}
        finally:
            correlation_id_var.reset(token)

    def test_omitted_when_unset(self):
        token = correlation_id_var.set("")
        try:
            assert add_correlation_id(None, "info", {"event": "x"}) == {"event": "x"}
        finally:
            correlation_id_var.reset(token)


class TestConfigureLogging:
    def teardown_method(self):
        structlog.reset_defaults()

    def test_json_output_with_correlation_id(self, capsys):
        configure_logging("INFO")
        token = correlation_id_var.set("cid-1")
        try:
            structlog.get_logger().info("video_updated", video_id="v1")
        finally:
            correlation_id_var.reset(token)

        line = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert line["event"] == "video_updated"
        assert line["video_id"] == "v1"
        assert line["correlation_id"] == "cid-1"
        assert line["level"] == "info"

    def test_filters_below_level(self, capsys):
        configure_logging("WARNING")

        structlog.get_logger().info("quiet")
        structlog.get_logger().warning("loud")

        out = capsys.readouterr().out
        assert "quiet" not in out
        assert "loud" in out

    def test_unknown_level_falls_back_to_info(self, capsys):
        configure_logging("nonsense")

        structlog.get_logger().debug("hidden")
        structlog.get_logger().info("shown")

        out = capsys.readouterr().out
        assert "hidden" not in out
        assert "shown" in out
