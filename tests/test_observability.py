import logging

from tireworks.observability import (
    FanOutEventSink,
    LoggingEventSink,
    MemoryEventSink,
    ObservabilityEvent,
)


def test_failure_events_log_at_warning(caplog):
    sink = LoggingEventSink("tireworks.events.test")
    with caplog.at_level(logging.INFO, logger="tireworks.events.test"):
        sink.emit(ObservabilityEvent("submission_started", "defective_tire_sales", {"quantity": 3}))
        sink.emit(ObservabilityEvent("refresh_failed", "defective_tire_sales", {"error": "x"}))

    levels = [r.levelno for r in caplog.records]
    assert levels == [logging.INFO, logging.WARNING]
    assert "defective_tire_sales.submission_started quantity=3" in caplog.records[0].getMessage()


def test_memory_sink_is_bounded():
    sink = MemoryEventSink(maxlen=2)
    for name in ("a", "b", "c"):
        sink.emit(ObservabilityEvent(name, "test"))
    assert sink.names() == ["b", "c"]
    assert [e.name for e in sink.find("c")] == ["c"]
    sink.clear()
    assert sink.names() == []


def test_fan_out_survives_a_failing_sink(caplog):
    class Broken:
        def emit(self, event):
            raise RuntimeError("disk full")

    first, last = MemoryEventSink(), MemoryEventSink()
    sink = FanOutEventSink([first, Broken(), last])

    sink.emit(ObservabilityEvent("refresh_completed", "test"))

    assert first.names() == ["refresh_completed"]
    assert last.names() == ["refresh_completed"]
    assert any("failed on refresh_completed" in r.getMessage() for r in caplog.records)


def test_setup_logging_keeps_sqlalchemy_quiet(monkeypatch):
    from tireworks.utils.logger import get_logger, setup_logging

    monkeypatch.delenv("TW_SQL_ECHO", raising=False)
    setup_logging("debug")
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
    assert get_logger("tireworks.test").name == "tireworks.test"
