"""
Tests for log sanitizing helpers
"""

from shopcart.logging import get_logger, sanitize_id_for_logging, sanitize_string_for_logging


def test_sanitize_id_truncates():
    assert sanitize_id_for_logging("DE123456789") == "DE123456"
    assert sanitize_id_for_logging(None) == "N/A"


def test_sanitize_string_escapes_newlines():
    assert sanitize_string_for_logging("book-1\nERROR fake entry") == "book-1\\nERROR fake entry"


def test_sanitize_string_truncates():
    assert sanitize_string_for_logging("x" * 60, max_length=10) == "x" * 10 + "..."


def test_get_logger_is_cached():
    assert get_logger("shopcart.test") is get_logger("shopcart.test")
