"""Tests for agri_advisor/utils/time_utils.py and utils/logging.py."""

from __future__ import annotations

import json
import logging
from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

from agri_advisor.config import LoggingConfig
from agri_advisor.utils.logging import _JsonFormatter, configure_logging
from agri_advisor.utils.time_utils import (
    EPOCH,
    as_aware,
    epoch_millis,
    from_iso,
    sort_by_recency,
    to_iso,
)


class TestTimeUtils:
    def test_as_aware(self):
        assert as_aware(None) == EPOCH
        assert as_aware(datetime(2026, 1, 1)).tzinfo == timezone.utc

    def test_sort_by_recency_undated_last_and_stable(self):
        t = datetime(2026, 1, 1, tzinfo=timezone.utc)
        records = [
            SimpleNamespace(name="none", created_at=None),
            SimpleNamespace(name="a", created_at=t),
            SimpleNamespace(name="newest", created_at=t + timedelta(days=1)),
            SimpleNamespace(name="b", created_at=t),
        ]
        assert [r.name for r in sort_by_recency(records)] == ["newest", "a", "b", "none"]

    def test_epoch_millis(self):
        assert epoch_millis(datetime(1970, 1, 1, 0, 0, 1, tzinfo=timezone.utc)) == 1000

    def test_iso_round_trip_normalises_to_utc(self):
        plus_two = timezone(timedelta(hours=2))
        ts = datetime(2026, 5, 1, 12, 0, tzinfo=plus_two)
        text = to_iso(ts)
        assert text == "2026-05-01T10:00:00+00:00"
        assert from_iso(text) == ts

    def test_from_iso_z_suffix_and_empty(self):
        assert from_iso("2026-05-01T10:00:00Z") == datetime(2026, 5, 1, 10, tzinfo=timezone.utc)
        assert from_iso(None) is None
        assert from_iso("") is None
        assert to_iso(None) is None


class TestLogging:
    def test_json_formatter_includes_extras(self):
        record = logging.LogRecord("agri_advisor.test", logging.INFO, __file__, 1, "stored %s", ("s1",), None)
        record.user_id = "u-1"
        payload = json.loads(_JsonFormatter().format(record))
        assert payload["msg"] == "stored s1"
        assert payload["level"] == "INFO"
        assert payload["user_id"] == "u-1"

    def test_configure_logging_writes_file(self, tmp_path):
        root = logging.getLogger()
        handlers, level = root.handlers[:], root.level
        log_file = tmp_path / "logs" / "app.log"
        try:
            configure_logging(LoggingConfig(level="INFO", log_file=str(log_file), json_format=True))
            logging.getLogger("agri_advisor.test").info("hello", extra={"set_id": "s9"})
            for handler in root.handlers:
                handler.flush()
            line = json.loads(log_file.read_text(encoding="utf-8").strip().splitlines()[-1])
            assert line["msg"] == "hello"
            assert line["set_id"] == "s9"
        finally:
            for handler in root.handlers:
                if handler not in handlers:
                    handler.close()
            root.handlers[:] = handlers
            root.setLevel(level)
