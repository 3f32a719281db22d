"""Tests for the payload builder."""

import pytest

from wifi_qr.errors import PayloadError
from wifi_qr.models import Encryption, Settings
from wifi_qr.payload import build_payload, escape, parse_payload, unescape


def test_wpa_payload_example(settings):
    assert build_payload(settings) == r"WIFI:T:WPA;S:MyNetwork;P:Secret\;1;;"


def test_wep_payload():
    s = Settings(ssid="Lab", encryption=Encryption.WEP, password="abcde")
    assert build_payload(s) == "WIFI:T:WEP;S:Lab;P:abcde;;"


def test_open_network_has_no_password_field():
    s = Settings(ssid="Cafe", encryption=Encryption.NONE, password="ignored")
    payload = build_payload(s)
    assert payload == "WIFI:T:;S:Cafe;;"
    assert "P:" not in payload


def test_hidden_flag():
    s = Settings(ssid="Secret", password="pw", hidden=True)
    assert build_payload(s) == "WIFI:T:WPA;S:Secret;P:pw;H:true;;"


@pytest.mark.parametrize(
    "raw, escaped",
    [
        ("a;b", r"a\;b"),
        ("a,b", r"a\,b"),
        ('say "hi"', r'say \"hi\"'),
        ("back\\slash", r"back\\slash"),
        ("plain:text", "plain:text"),
    ],
)
def test_escape(raw, escaped):
    assert escape(raw) == escaped
    assert unescape(escaped) == raw


def test_escape_in_ssid_and_password():
    s = Settings(ssid='Home,"Net"', password="p\\w;")
    assert build_payload(s) == r'WIFI:T:WPA;S:Home\,\"Net\";P:p\\w\;;;'


def test_parse_recovers_fields():
    s = Settings(ssid='we;ird,"ssid"\\', password=";;,,\\\\", hidden=True)
    creds = parse_payload(build_payload(s))
    assert creds.ssid == s.ssid
    assert creds.password == s.password
    assert creds.encryption == Encryption.WPA
    assert creds.hidden is True


def test_parse_open_network():
    creds = parse_payload("WIFI:T:nopass;S:Cafe;;")
    assert creds.encryption == Encryption.NONE
    assert creds.password is None


def test_parse_ignores_unknown_fields():
    creds = parse_payload("WIFI:S:Net;T:WPA;P:pw;R:1;;")
    assert creds.ssid == "Net"
    assert creds.password == "pw"


@pytest.mark.parametrize(
    "text",
    [
        "MECARD:N:x;;",
        "WIFI:T:WPA;S:Net;P:pw",
        r"WIFI:T:WPA;S:Net;P:x\;;",
        "WIFI:T:WPA;P:pw;;",
        "WIFI:T:XYZ;S:Net;;",
        "WIFI:garbage;;",
    ],
)
def test_parse_rejects_malformed(text):
    with pytest.raises(PayloadError):
        parse_payload(text)
