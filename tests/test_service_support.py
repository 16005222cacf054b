import json
import logging

from app.config import validate_config
from app.logging_config import StructuredFormatter, get_request_id, set_request_id
from app.rate_limit import RateLimiter


def test_rate_limiter_window():
    limiter = RateLimiter(2)
    assert limiter.allow("a")
    assert limiter.allow("a")
    blocked = limiter.check("a")
    assert not blocked.allowed
    assert blocked.remaining == 0
    assert blocked.retry_after is not None

    # other clients are counted separately
    assert limiter.allow("b")

    limiter.reset("a")
    assert limiter.allow("a")


def test_request_id_generated_and_kept():
    generated = set_request_id()
    assert generated
    assert get_request_id() == generated
    assert set_request_id("fixed") == "fixed"
    assert get_request_id() == "fixed"


def test_structured_formatter_is_json():
    set_request_id("req-1")
    record = logging.LogRecord("plutusscan.test", logging.INFO, __file__, 1, "hello %s", ("world",), None)
    line = json.loads(StructuredFormatter().format(record))
    assert line["message"] == "hello world"
    assert line["level"] == "INFO"
    assert line["request_id"] == "req-1"


def test_validate_config_defaults():
    checks = validate_config()
    assert checks["max_passes"] is True
    assert checks["chunk_size"] is True
