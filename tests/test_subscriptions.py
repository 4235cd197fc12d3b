import asyncio

import pytest

from unboxd_engine.subscriptions import PollingSubscription


def test_interval_must_be_positive():
    with pytest.raises(ValueError):
        PollingSubscription(lambda: None, lambda r: None, 0)


def test_start_requires_running_loop():
    async def poll():
        return 1

    with pytest.raises(RuntimeError):
        PollingSubscription(poll, lambda r: None, 0.01).start()


def test_none_results_are_not_delivered():
    delivered = []
    polls = []

    async def poll():
        polls.append(1)
        return None if len(polls) < 3 else len(polls)

    async def scenario():
        sub = PollingSubscription(poll, delivered.append, 0.005, stop_after_result=True)
        sub.start()
        while sub.active:
            await asyncio.sleep(0.005)

    asyncio.run(scenario())
    assert delivered == [3]


def test_failures_without_handler_are_logged_and_polling_continues(caplog):
    polls = []

    async def poll():
        polls.append(1)
        if len(polls) == 1:
            raise RuntimeError("boom")
        return "ok"

    delivered = []

    async def scenario():
        sub = PollingSubscription(poll, delivered.append, 0.005, stop_after_result=True, name="probe")
        sub.start()
        while sub.active:
            await asyncio.sleep(0.005)

    asyncio.run(scenario())
    assert delivered == ["ok"]
    assert "probe poll failed: boom" in caplog.text


def test_raising_callback_is_reported_and_polling_continues():
    delivered = []
    errors = []

    async def poll():
        return "tick"

    def on_result(result):
        delivered.append(result)
        if len(delivered) == 1:
            raise ValueError("bad render")

    async def scenario():
        sub = PollingSubscription(poll, on_result, 0.005, on_error=errors.append)
        sub.start()
        while len(delivered) < 3:
            await asyncio.sleep(0.005)
        assert sub.active
        sub.cancel()

    asyncio.run(scenario())
    assert [type(e) for e in errors] == [ValueError]


def test_raising_callback_without_handler_is_logged(caplog):
    delivered = []

    async def poll():
        return "tick"

    def on_result(result):
        delivered.append(result)
        raise ValueError("bad render")

    async def scenario():
        sub = PollingSubscription(poll, on_result, 0.005, name="ticker")
        sub.start()
        while len(delivered) < 2:
            await asyncio.sleep(0.005)
        sub.cancel()

    asyncio.run(scenario())
    assert "ticker callback failed: bad render" in caplog.text


def test_raising_error_handler_does_not_end_polling(caplog):
    polls = []

    async def poll():
        polls.append(1)
        raise ConnectionError("offline")

    def on_error(exc):
        raise RuntimeError("handler broke")

    async def scenario():
        sub = PollingSubscription(poll, lambda r: None, 0.005, on_error=on_error, name="flaky")
        sub.start()
        while len(polls) < 3:
            await asyncio.sleep(0.005)
        sub.cancel()

    asyncio.run(scenario())
    assert "flaky error handler failed: handler broke" in caplog.text
