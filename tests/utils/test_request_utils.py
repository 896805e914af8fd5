from types import SimpleNamespace

from isogen.utils.request_utils import get_client_ip


def _request(headers: dict[str, str], host: str | None = "10.0.0.1") -> SimpleNamespace:
    client = SimpleNamespace(host=host) if host else None
    return SimpleNamespace(headers=headers, client=client)


def test_forwarded_for_first_entry_wins() -> None:
    request = _request({"X-Forwarded-For": "203.0.113.5, 10.0.0.2", "X-Real-IP": "198.51.100.1"})
    assert get_client_ip(request) == "203.0.113.5"


def test_real_ip_used_when_no_forwarded_for() -> None:
    assert get_client_ip(_request({"X-Real-IP": " 198.51.100.1 "})) == "198.51.100.1"


def test_falls_back_to_socket_address() -> None:
    assert get_client_ip(_request({})) == "10.0.0.1"


def test_unknown_when_nothing_available() -> None:
    assert get_client_ip(_request({"X-Forwarded-For": " , "}, host=None)) == "unknown"
