import json
from unittest.mock import patch
from sms2fa.observability.logging import log

def test_log_redacts_phone_numbers(capsys):
    with patch("sms2fa.observability.logging.settings") as mock_settings:
        mock_settings.ENABLE_PII_REDACTION = True
        log(event="phone_validation_requested", sessionId="s1", mobile_number="5551234")
    line = json.loads(capsys.readouterr().out.strip())
    assert line["event"] == "phone_validation_requested"
    assert line["sessionId"] == "s1"
    assert line["mobile_number"] == "[REDACTED:7chars]"

def test_log_plain_when_redaction_off(capsys):
    with patch("sms2fa.observability.logging.settings") as mock_settings:
        mock_settings.ENABLE_PII_REDACTION = False
        log(event="x", mobile_number="5551234")
    line = json.loads(capsys.readouterr().out.strip())
    assert line["mobile_number"] == "5551234"
