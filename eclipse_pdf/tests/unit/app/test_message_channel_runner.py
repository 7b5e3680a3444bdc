from __future__ import annotations

import threading

from eclipse_pdf.app.background import BackgroundRunner
from eclipse_pdf.app.message_channel import MessageChannel, MessageKind


def test_drain_preserves_order_and_survives_handler_errors() -> None:
    channel = MessageChannel()
    channel.post(MessageKind.OPEN_DOCUMENT, "a")
    channel.post(MessageKind.REOPEN)
    channel.post(MessageKind.OPEN_DOCUMENT, "b")
    seen = []

    def dispatch(message) -> None:
        seen.append(message.payload)
        if message.kind is MessageKind.REOPEN:
            raise RuntimeError("handler bug")

    assert channel.drain(dispatch) == 3
    assert seen == ["a", None, "b"]
    assert channel.drain(dispatch) == 0


def test_drain_limit() -> None:
    channel = MessageChannel()
    for i in range(5):
        channel.post(MessageKind.MENU_COMMAND, i)

    assert channel.drain(lambda m: None, limit=2) == 2
    assert len(channel.pending()) == 3


def test_post_from_other_threads() -> None:
    channel = MessageChannel()
    threads = [
        threading.Thread(target=channel.post, args=(MessageKind.SECOND_INSTANCE, n)) for n in range(8)
    ]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    got = []
    channel.drain(lambda m: got.append(m.payload))
    assert sorted(got) == list(range(8))


def test_closed_channel_drops_posts() -> None:
    channel = MessageChannel()
    channel.close()

    assert channel.post(MessageKind.QUIT) is False
    assert channel.pending() == []


def test_submit_posts_result_back() -> None:
    channel = MessageChannel()
    runner = BackgroundRunner(channel, max_workers=1)
    try:
        runner.submit("answer", lambda: 42, lambda value: None).result(timeout=2)
    finally:
        runner.shutdown(wait=True)

    [message] = channel.pending()
    assert message.kind is MessageKind.TASK_RESULT
    assert message.payload == 42
    assert message.meta["label"] == "answer"


def test_submit_posts_failure_back() -> None:
    channel = MessageChannel()
    runner = BackgroundRunner(channel, max_workers=1)

    def fail() -> None:
        raise ValueError("nope")

    try:
        runner.submit("bad", fail, lambda value: None).result(timeout=2)
    finally:
        runner.shutdown(wait=True)

    [message] = channel.pending()
    assert message.kind is MessageKind.TASK_FAILED
    assert isinstance(message.payload, ValueError)


def test_fire_swallows_errors_and_posts_nothing() -> None:
    channel = MessageChannel()
    runner = BackgroundRunner(channel, max_workers=1)

    def fail(x: int) -> None:
        raise RuntimeError(str(x))

    try:
        future = runner.fire("sync_usage", fail, 1)
        future.result(timeout=2)
    finally:
        runner.shutdown(wait=True)

    assert channel.pending() == []
    assert runner.fire("late", fail, 2) is None
