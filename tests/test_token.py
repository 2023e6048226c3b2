from unittest import mock

from agentkit.token import Token

NOW = 1_700_000_000


def test_set_expires_at_adds_lifetime_to_now():
    token = Token(access_token="token", expires_in=3600)
    with mock.patch("time.time", return_value=float(NOW)):
        token.set_expires_at()
    assert token.expires_at - NOW == token.expires_in


def test_fresh_token_is_not_expired():
    token = Token(expires_in=3600)
    with mock.patch("time.time", return_value=float(NOW)):
        token.set_expires_at()
        assert not token.is_expired()


def test_token_inside_last_tenth_is_expired():
    token = Token(expires_in=100, expires_at=NOW + 10)
    with mock.patch("time.time", return_value=float(NOW)):
        assert token.is_expired()


def test_token_just_before_last_tenth_is_valid():
    token = Token(expires_in=100, expires_at=NOW + 11)
    with mock.patch("time.time", return_value=float(NOW)):
        assert not token.is_expired()


def test_expires_in_round_trip():
    token = Token(expires_in=7200)
    with mock.patch("time.time", return_value=float(NOW)):
        token.set_expires_at()
        token.expires_in = 0
        token.set_expires_in()
    assert token.expires_in == 7200


def test_dict_round_trip_uses_wire_names():
    token = Token(access_token="token", refresh_token="secret", expires_in=60, expires_at=NOW)
    data = token.to_dict()
    assert set(data) == {"access_token", "refresh_token", "expires_in", "expires_at"}
    assert Token.from_dict(data) == token