import asyncio
from types import SimpleNamespace

import pytest

from scenerag.exceptions import GenerationError, ProviderException, StoreError
from scenerag.providers.openai_providers.llm_provider import completion_to_dict, normalize_tool_calls
from scenerag.utils.error_handler import ErrorHandler, convert_exceptions, handle_exceptions


def test_handle_exceptions_retries_then_returns_fallback():
    attempts = []

    @handle_exceptions(retries=3, fallback=lambda x: f"fallback {x}", exceptions=(ProviderException,), max_delay=0)
    async def flaky(x):
        attempts.append(x)
        raise ProviderException("down")

    assert asyncio.run(flaky("a")) == "fallback a"
    assert attempts == ["a", "a", "a"]


def test_handle_exceptions_stops_when_not_retryable():
    attempts = []

    @handle_exceptions(retries=3, exceptions=(ProviderException,), should_retry=lambda e: False, max_delay=0)
    def broken():
        attempts.append(1)
        raise ProviderException("fatal")

    with pytest.raises(ProviderException):
        broken()
    assert attempts == [1]


def test_convert_exceptions_maps_foreign_errors_only():
    @convert_exceptions({OSError: StoreError})
    def read(error):
        raise error

    with pytest.raises(StoreError) as info:
        read(OSError("disk gone"))
    assert info.value.details == {"original_exception": "OSError"}

    with pytest.raises(GenerationError):
        read(GenerationError("already ours"))
    with pytest.raises(KeyError):
        read(KeyError("unmapped"))


@pytest.mark.parametrize(
    "error,expected",
    [
        (SimpleNamespace(status_code=429), True),
        (ProviderException("HTTP 429 from embedding endpoint: resource exhausted"), True),
        (Exception("RESOURCE_EXHAUSTED: quota"), True),
        (Exception("connection reset"), False),
    ],
)
def test_is_rate_limit_error(error, expected):
    assert ErrorHandler.is_rate_limit_error(error) is expected


def _tool_call(call_id, name, arguments):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


def test_normalize_tool_calls_parses_arguments():
    calls = normalize_tool_calls([_tool_call("c1", "count_videos", '{"campaignId": "camp1"}'), _tool_call("c2", "count_campaigns", "")])
    assert calls == [
        {"id": "c1", "name": "count_videos", "arguments": {"campaignId": "camp1"}},
        {"id": "c2", "name": "count_campaigns", "arguments": {}},
    ]
    assert normalize_tool_calls(None) == []


def test_normalize_tool_calls_rejects_bad_arguments():
    with pytest.raises(GenerationError):
        normalize_tool_calls([_tool_call("c1", "count_videos", "{oops")])
    with pytest.raises(GenerationError):
        normalize_tool_calls([_tool_call("c1", "count_videos", "[1, 2]")])


def test_completion_to_dict():
    response = SimpleNamespace(
        model="gpt-4o",
        usage=None,
        choices=[SimpleNamespace(
            finish_reason="stop",
            message=SimpleNamespace(content="hello", tool_calls=None),
        )],
    )
    assert completion_to_dict(response) == {
        "content": "hello",
        "tool_calls": [],
        "usage": None,
        "model": "gpt-4o",
        "finish_reason": "stop",
    }
