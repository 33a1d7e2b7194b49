from __future__ import annotations

from datetime import UTC, datetime, timedelta

from chat_dumper.irc.live import LiveDetector
from chat_dumper.irc.parser import parse_message
from tests.fixtures.chat_lines import privmsg

T0 = datetime(2024, 5, 1, 20, 0, tzinfo=UTC)


def _msg(text: str):
    return parse_message(privmsg(text))


def _feed(detector: LiveDetector, texts: list[str], now: datetime) -> list[bool]:
    return [detector.observe(_msg(text), now=now) for text in texts]


def test_matching_is_case_sensitive_substring():
    detector = LiveDetector()
    assert detector.mentions_live(_msg("we are live!"))
    assert detector.mentions_live(_msg("pogchamp"))
    assert not detector.mentions_live(_msg("LIVE"))
    assert not detector.mentions_live(_msg("hello"))


def test_fires_once_when_majority_matches():
    detector = LiveDetector()
    texts = ["hello"] * 4 + ["live"] * 6
    results = _feed(detector, texts, T0)
    assert results[-1] is True
    assert results.count(True) == 1


def test_exactly_half_does_not_fire():
    detector = LiveDetector()
    results = _feed(detector, ["hello"] * 5 + ["live"] * 5, T0)
    assert results.count(True) == 0


def test_debounce_suppresses_and_then_allows_refire():
    detector = LiveDetector()
    _feed(detector, ["hello"] * 4 + ["live"] * 6, T0)
    assert detector.observe(_msg("live"), now=T0 + timedelta(seconds=30)) is False
    assert detector.observe(_msg("live"), now=T0 + timedelta(seconds=61)) is True


def test_window_slides():
    detector = LiveDetector(window_size=4)
    _feed(detector, ["live", "live", "hi", "hi"], T0)
    assert detector.matching_count() == 2
    detector.observe(_msg("hi"), now=T0)
    assert detector.matching_count() == 1
    assert len(detector.window) == 4


def test_messages_without_text_count_as_non_matching():
    detector = LiveDetector()
    ping = parse_message("PING :tmi.twitch.tv")
    assert detector.mentions_live(ping) is False


def test_reset_clears_window_and_debounce():
    detector = LiveDetector()
    _feed(detector, ["live"] * 6, T0)
    detector.reset()
    assert detector.matching_count() == 0
    assert _feed(detector, ["live"] * 6, T0 + timedelta(seconds=1))[-1] is True
