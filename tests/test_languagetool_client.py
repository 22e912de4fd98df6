"""Tests for the LanguageTool client."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Callable
from urllib.parse import parse_qs

import httpx
import pytest

from proofline.checking import CheckerSettings, LanguageToolClient, parse_matches
from proofline.checking.languagetool import Utf16Index
from proofline.core.errors import CheckerError, ErrorCode
from proofline.services import Settings

FAST = dict(retry_min_seconds=0.0, retry_max_seconds=0.0)


def match(offset: int, length: int, **overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "message": "Accord du déterminant",
        "offset": offset,
        "length": length,
        "replacements": [{"value": "un"}],
        "context": {"text": "...", "offset": offset, "length": length},
        "rule": {"id": "AGREEMENT", "category": {"id": "GRAMMAR"}},
    }
    payload.update(overrides)
    return payload


class Recorder:
    """MockTransport handler that replays responses and records form bodies."""

    def __init__(self, *responses: httpx.Response | Exception | Callable[[], httpx.Response]) -> None:
        self._responses = list(responses)
        self.forms: list[dict[str, list[str]]] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.forms.append(parse_qs(request.content.decode("utf-8")))
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response()
        return response

    @property
    def calls(self) -> int:
        return len(self.forms)


def make_client(recorder: Recorder, **settings: Any) -> LanguageToolClient:
    transport = httpx.MockTransport(recorder)
    return LanguageToolClient(
        CheckerSettings(**{**FAST, **settings}),
        client=httpx.AsyncClient(transport=transport),
    )


def ok(*matches: dict[str, Any]) -> httpx.Response:
    return httpx.Response(200, json={"matches": list(matches)})


def test_check_parses_matches_and_posts_form() -> None:
    recorder = Recorder(ok(match(15, 3)))
    client = make_client(recorder, skip_rules=("MY_RULE",))

    issues = asyncio.run(client.check("Titre\nCeci est une test.", "fr"))

    assert len(issues) == 1
    issue = issues[0]
    assert (issue.offset, issue.length, issue.original) == (15, 3, "une")
    assert issue.rule_id == "AGREEMENT"
    assert issue.category == "GRAMMAR"
    assert issue.replacements == ("un",)
    assert issue.source == "languagetool"

    form = recorder.forms[0]
    assert form["text"] == ["Titre\nCeci est une test."]
    assert form["language"] == ["fr"]
    assert form["disabledRules"] == ["MY_RULE,WHITESPACE_RULE,COMMA_PARENTHESIS_WHITESPACE,UNPAIRED_BRACKETS"]
    assert "apiKey" not in form


def test_utf16_offsets_are_converted() -> None:
    text = "😀 une faute"
    recorder = Recorder(ok(match(3, 3)))

    issues = asyncio.run(make_client(recorder).check(text, "fr"))

    assert issues[0].offset == 2
    assert issues[0].original == "une"
    assert text[issues[0].offset : issues[0].offset + issues[0].length] == "une"


def test_utf16_index_without_astral_characters_is_identity() -> None:
    index = Utf16Index("abc")

    assert index.to_index(2) == 2
    assert index.to_index(10) == 3


def test_utf16_index_after_several_astral_characters() -> None:
    text = "a😀b😀c"
    index = Utf16Index(text)

    assert index.to_index(3) == 2  # "b"
    assert index.to_index(6) == 4  # "c"
    assert index.to_index(7) == 5


def test_replacements_are_capped_and_malformed_matches_skipped() -> None:
    raw = [
        match(0, 3, replacements=[{"value": v} for v in ("a", "b", "c", "d")]),
        {"message": "no offsets"},
        match("x", 1),
    ]

    issues = parse_matches(raw, "une phrase")

    assert len(issues) == 1
    assert issues[0].replacements == ("a", "b", "c")


def test_premium_flag_is_read() -> None:
    issues = parse_matches([match(0, 3, rule={"id": "P", "category": {"id": "X"}, "isPremium": True})], "une")

    assert issues[0].is_premium


def test_text_is_truncated_before_submission() -> None:
    recorder = Recorder(ok())

    asyncio.run(make_client(recorder, max_text_length=5).check("abcdefghij", "fr"))

    assert recorder.forms[0]["text"] == ["abcde"]


@pytest.mark.parametrize("text", ["", "   \n  "])
def test_blank_text_skips_request(text: str) -> None:
    recorder = Recorder(ok())

    assert asyncio.run(make_client(recorder).check(text, "fr")) == []
    assert recorder.calls == 0


def test_credentials_are_sent_when_configured() -> None:
    recorder = Recorder(ok())

    asyncio.run(make_client(recorder, username="me@example.com", api_key="secret").check("texte", "en-US"))

    form = recorder.forms[0]
    assert form["username"] == ["me@example.com"]
    assert form["apiKey"] == ["secret"]
    assert form["language"] == ["en-US"]


def test_retries_on_server_errors_then_succeeds() -> None:
    recorder = Recorder(httpx.Response(503), httpx.Response(429), ok(match(0, 3)))

    issues = asyncio.run(make_client(recorder, max_retries=3).check("une", "fr"))

    assert recorder.calls == 3
    assert len(issues) == 1


def test_gives_up_after_max_retries() -> None:
    recorder = Recorder(lambda: httpx.Response(503))

    with pytest.raises(CheckerError) as excinfo:
        asyncio.run(make_client(recorder, max_retries=2).check("texte", "fr"))

    assert recorder.calls == 2
    assert excinfo.value.status_code == 503
    assert excinfo.value.error_code == ErrorCode.CHECKER_UNAVAILABLE


def test_client_errors_are_not_retried() -> None:
    recorder = Recorder(httpx.Response(400, text="bad language"))

    with pytest.raises(CheckerError) as excinfo:
        asyncio.run(make_client(recorder).check("texte", "xx"))

    assert recorder.calls == 1
    assert excinfo.value.status_code == 400
    assert excinfo.value.to_dict()["status_code"] == 400


def test_transport_errors_are_retried_and_wrapped() -> None:
    recorder = Recorder(httpx.ConnectError("connection refused"))

    with pytest.raises(CheckerError) as excinfo:
        asyncio.run(make_client(recorder, max_retries=2).check("texte", "fr"))

    assert recorder.calls == 2
    assert excinfo.value.status_code is None


def test_invalid_json_raises_checker_error() -> None:
    recorder = Recorder(httpx.Response(200, content=b"<html>oops</html>"))

    with pytest.raises(CheckerError):
        asyncio.run(make_client(recorder).check("texte", "fr"))


def test_missing_matches_key_yields_no_issues() -> None:
    recorder = Recorder(httpx.Response(200, content=json.dumps({"software": {}}).encode()))

    assert asyncio.run(make_client(recorder).check("texte", "fr")) == []


def test_injected_client_is_not_closed() -> None:
    async def scenario() -> bool:
        http = httpx.AsyncClient(transport=httpx.MockTransport(Recorder(ok())))
        async with LanguageToolClient(CheckerSettings(), client=http):
            pass
        closed = http.is_closed
        await http.aclose()
        return closed

    assert asyncio.run(scenario()) is False


def test_checker_settings_from_settings() -> None:
    settings = Settings(
        languagetool_url="https://lt.example.com/v2/check",
        skip_rules=["A"],
        max_text_length=100,
        languagetool_username="user",
        languagetool_api_key="key",
    )

    derived = CheckerSettings.from_settings(settings)

    assert derived.url == "https://lt.example.com/v2/check"
    assert derived.skip_rules == ("A",)
    assert derived.max_text_length == 100
    assert derived.disabled_rules()[0] == "A"
    assert (derived.username, derived.api_key) == ("user", "key")
