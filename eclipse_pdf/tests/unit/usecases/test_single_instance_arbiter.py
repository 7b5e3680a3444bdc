from __future__ import annotations

from eclipse_pdf.tests.unit.fakes import FakeInstancePort
from eclipse_pdf.usecases.single_instance import SingleInstanceArbiter


def test_primary_claims_and_serves() -> None:
    port = FakeInstancePort(acquire=True)
    seen = []
    arbiter = SingleInstanceArbiter(port, lambda argv, cwd: seen.append((argv, cwd)))

    assert arbiter.claim(["app", "/tmp/a.pdf"], "/home") is True
    assert port.forwarded == []
    assert port.handler is not None

    port.handler(["app", "/tmp/b.pdf"], "/work")
    assert seen == [(["app", "/tmp/b.pdf"], "/work")]


def test_secondary_forwards_and_exits() -> None:
    port = FakeInstancePort(acquire=False)
    arbiter = SingleInstanceArbiter(port, lambda argv, cwd: None)

    assert arbiter.claim(["app", "/tmp/a.pdf"], "/home") is False
    assert port.forwarded == [(["app", "/tmp/a.pdf"], "/home")]
    assert port.handler is None


def test_secondary_still_exits_when_primary_silent() -> None:
    port = FakeInstancePort(acquire=False, forward_ok=False)
    arbiter = SingleInstanceArbiter(port, lambda argv, cwd: None)

    assert arbiter.claim(["app"]) is False


def test_lock_error_runs_unguarded() -> None:
    port = FakeInstancePort(acquire=PermissionError("read-only"))
    arbiter = SingleInstanceArbiter(port, lambda argv, cwd: None)

    assert arbiter.claim(["app"]) is True
    assert port.handler is None


def test_release_closes_port() -> None:
    port = FakeInstancePort()
    arbiter = SingleInstanceArbiter(port, lambda argv, cwd: None)
    arbiter.claim(["app"])

    arbiter.release()

    assert port.closed
