from core.logging import _redact


def test_codes_and_passwords_are_redacted():
    event = _redact(None, "info", {"event": "x", "otp": "482913", "password": "rahasia123"})
    assert event["otp"] == "[redacted]"
    assert event["password"] == "[redacted]"


def test_raw_phone_numbers_are_masked():
    event = _redact(None, "info", {"event": "x", "phone": "6285157300793", "to": "628515****0793"})
    assert event["phone"] == "628515****0793"
    assert event["to"] == "628515****0793"
