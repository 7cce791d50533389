import logging

import pytest

from dreamlens.utils.logging import RequestContext, _request_id, current_request_id


def test_request_context_sets_and_resets_id():
    assert current_request_id() is None

    with RequestContext("req-1") as ctx:
        assert current_request_id() == "req-1"
        assert ctx.request_id == "req-1"

    assert _request_id.get() is None


def test_nested_context_inherits_id():
    with RequestContext("outer"):
        with RequestContext(provider="claude") as inner:
            assert inner.request_id == "outer"
        assert current_request_id() == "outer"


def test_generated_id():
    with RequestContext() as ctx:
        assert len(ctx.request_id) == 8
        assert current_request_id() == ctx.request_id


def test_format():
    ctx = RequestContext("abc", task="text", model=None)
    assert ctx.format("Starting") == "[abc] Starting | task=text"
    assert ctx.format("Done", symbols=3) == "[abc] Done | task=text symbols=3"
    assert RequestContext("abc").format("Plain") == "[abc] Plain"


def test_bind_shares_id():
    ctx = RequestContext("abc", task="image")
    child = ctx.bind(provider="gemini")
    assert child.request_id == "abc"
    assert child.context == {"task": "image", "provider": "gemini"}


def test_logs_with_context(caplog):
    logger = logging.getLogger("dreamlens.test")
    with caplog.at_level(logging.INFO, logger="dreamlens.test"):
        with RequestContext("xyz", logger=logger, task="text") as ctx:
            ctx.info("Analysis completed", symbols=4)

    assert "[xyz] Analysis completed | task=text symbols=4" in caplog.text


@pytest.mark.asyncio
async def test_async_context():
    async with RequestContext("async-1") as ctx:
        assert current_request_id() == "async-1"
        assert ctx.elapsed_ms >= 0
    assert current_request_id() is None
