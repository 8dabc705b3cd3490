from datetime import UTC, datetime

from letterbox.adapters.clock import FrozenClock
from letterbox.api.flash import FlashCodec, FlashLevel, FlashMessage


def test_roundtrip() -> None:
    codec = FlashCodec("secret")
    messages = [FlashMessage(FlashLevel.ERROR, "Authentication failed")]

    assert codec.decode(codec.encode(messages)) == messages


def test_missing_cookie() -> None:
    assert FlashCodec("secret").decode(None) == []
    assert FlashCodec("secret").decode("") == []


def test_tampered_cookie_ignored() -> None:
    codec = FlashCodec("secret")
    token = codec.encode([FlashMessage(FlashLevel.INFO, "hello")])
    header, payload, signature = token.split(".")

    assert codec.decode(f"{header}.{payload}.{signature[::-1]}") == []


def test_other_secret_rejected() -> None:
    token = FlashCodec("attacker").encode([FlashMessage(FlashLevel.INFO, "forged")])
    assert FlashCodec("secret").decode(token) == []


def test_expired_cookie_ignored() -> None:
    past = FrozenClock(datetime(2020, 1, 1, tzinfo=UTC))
    token = FlashCodec("secret", clock=past).encode([FlashMessage(FlashLevel.INFO, "old")])

    assert FlashCodec("secret").decode(token) == []
