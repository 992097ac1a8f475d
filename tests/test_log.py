import json
import logging

from tokend.log import JsonLogFormatter, configure_logging


def make_record(**extra):
    record = logging.LogRecord("tokend.leases.storage", logging.INFO, __file__, 1, "Manager is ready.", None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_extra_fields():
    payload = json.loads(
        JsonLogFormatter().format(make_record(provider="SecretProvider", correlation_id="abc", lease_duration=60))
    )

    assert payload["message"] == "Manager is ready."
    assert payload["level"] == "INFO"
    assert payload["logger"] == "tokend.leases.storage"
    assert payload["provider"] == "SecretProvider"
    assert payload["correlation_id"] == "abc"
    assert payload["lease_duration"] == 60
    assert "timestamp" in payload


def test_json_formatter_stringifies_unserializable_values():
    payload = json.loads(JsonLogFormatter().format(make_record(error=ValueError("boom"))))

    assert payload["error"] == "boom"


def test_configure_logging_installs_one_handler():
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    try:
        configure_logging("debug", json_format=True)

        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JsonLogFormatter)
        assert root.level == logging.DEBUG
    finally:
        root.handlers = saved_handlers
        root.setLevel(saved_level)
