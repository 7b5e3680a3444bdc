from __future__ import annotations

import threading
from pathlib import Path
from typing import List, Optional, Tuple

from eclipse_pdf.adapters.instance_local import LocalInstanceAdapter


def test_second_adapter_cannot_take_lock(tmp_path: Path) -> None:
    primary = LocalInstanceAdapter(tmp_path)
    secondary = LocalInstanceAdapter(tmp_path, forward_timeout_s=0.2)
    try:
        assert primary.try_acquire() is True
        assert primary.is_primary
        assert secondary.try_acquire() is False
        assert not secondary.is_primary
    finally:
        primary.close()
        secondary.close()


def test_forwarded_request_reaches_primary(tmp_path: Path) -> None:
    received: List[Tuple[List[str], Optional[str]]] = []
    delivered = threading.Event()

    def on_request(argv, cwd) -> None:
        received.append((list(argv), cwd))
        delivered.set()

    primary = LocalInstanceAdapter(tmp_path)
    secondary = LocalInstanceAdapter(tmp_path, forward_timeout_s=2.0)
    try:
        assert primary.try_acquire()
        primary.serve(on_request)

        ok = secondary.forward(["app", "/tmp/report.pdf"], "/home/reader")

        assert ok is True
        assert delivered.wait(2.0)
        assert received == [(["app", "/tmp/report.pdf"], "/home/reader")]
    finally:
        primary.close()


def test_lock_released_on_close(tmp_path: Path) -> None:
    first = LocalInstanceAdapter(tmp_path)
    assert first.try_acquire()
    first.close()

    second = LocalInstanceAdapter(tmp_path)
    try:
        assert second.try_acquire() is True
    finally:
        second.close()
    assert not (tmp_path / "eclipse-pdf.instance.port").exists()


def test_forward_without_primary_gives_up(tmp_path: Path) -> None:
    lonely = LocalInstanceAdapter(tmp_path, forward_timeout_s=0.1)

    assert lonely.forward(["app"], None) is False
