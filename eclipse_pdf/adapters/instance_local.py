"""Single-instance lock plus a loopback channel for forwarded launches.

The primary holds an exclusive OS file lock in the data directory and
listens on an ephemeral ``127.0.0.1`` port published next to the lock.
A secondary that fails the lock connects to that port, sends its raw
arguments as one JSON line and waits for ``ok``.
"""

from __future__ import annotations

import json
import logging
import os
import socket
import threading
import time
from pathlib import Path
from typing import Any, Optional, Sequence

from eclipse_pdf.domain.ports import InstancePort, InstanceRequestHandler

_MAX_REQUEST_BYTES = 64 * 1024
_ACK = b"ok\n"


def _lock_file(handle) -> bool:
    if os.name == "nt":
        import msvcrt

        try:
            handle.seek(0)
            msvcrt.locking(handle.fileno(), msvcrt.LK_NBLCK, 1)  # type: ignore[attr-defined]
        except OSError:
            return False
        return True
    import fcntl

    try:
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    except OSError:
        return False
    return True


def _unlock_file(handle) -> None:
    if os.name == "nt":
        import msvcrt

        try:
            handle.seek(0)
            msvcrt.locking(handle.fileno(), msvcrt.LK_UNLCK, 1)  # type: ignore[attr-defined]
        except OSError:
            return
        return
    import fcntl

    try:
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    except OSError:
        return


class LocalInstanceAdapter(InstancePort):
    """File-lock + loopback-socket implementation of ``InstancePort``."""

    def __init__(
        self,
        data_dir: str | Path,
        *,
        name: str = "eclipse-pdf",
        forward_timeout_s: float = 3.0,
    ) -> None:
        self._log = logging.getLogger(__name__)
        self.root = Path(str(data_dir)).expanduser()
        self.lock_path = self.root / f"{name}.instance.lock"
        self.port_path = self.root / f"{name}.instance.port"
        self.forward_timeout_s = forward_timeout_s
        self._handle: Any = None
        self._server: Optional[socket.socket] = None
        self._thread: Optional[threading.Thread] = None
        self._stopping = threading.Event()

    @property
    def is_primary(self) -> bool:
        return self._handle is not None

    # ------------------------------------------------------------------
    # Primary side
    # ------------------------------------------------------------------
    def try_acquire(self) -> bool:
        if self._handle is not None:
            return True
        self.root.mkdir(parents=True, exist_ok=True)
        handle = self.lock_path.open("a+", encoding="utf-8")
        if not _lock_file(handle):
            handle.close()
            return False
        self._handle = handle
        try:
            handle.seek(0)
            handle.truncate()
            handle.write(f"pid={os.getpid()}\n")
            handle.flush()
        except OSError:
            # Lock is still held; the pid line is informational only.
            pass
        # Publish the port right away so early secondaries queue in the backlog.
        server = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        server.bind(("127.0.0.1", 0))
        server.listen(8)
        server.settimeout(0.5)
        self._server = server
        port = server.getsockname()[1]
        tmp = self.port_path.with_suffix(".port.tmp")
        tmp.write_text(str(port), encoding="utf-8")
        os.replace(tmp, self.port_path)
        self._log.info("Primary instance (pid=%s) listening on port %s", os.getpid(), port)
        return True

    def serve(self, on_request: InstanceRequestHandler) -> None:
        if self._server is None:
            raise RuntimeError("serve() requires a successful try_acquire()")
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._accept_loop,
            args=(self._server, on_request),
            name="instance-listener",
            daemon=True,
        )
        self._thread.start()

    def _accept_loop(self, server: socket.socket, on_request: InstanceRequestHandler) -> None:
        while not self._stopping.is_set():
            try:
                conn, _addr = server.accept()
            except socket.timeout:
                continue
            except OSError:
                break
            with conn:
                try:
                    conn.settimeout(self.forward_timeout_s)
                    argv, cwd = self._read_request(conn)
                    on_request(argv, cwd)
                    conn.sendall(_ACK)
                except (OSError, ValueError) as exc:
                    self._log.warning("Dropped malformed instance request: %s", exc)

    @staticmethod
    def _read_request(conn: socket.socket) -> tuple[list[str], Optional[str]]:
        buf = b""
        while b"\n" not in buf:
            chunk = conn.recv(4096)
            if not chunk:
                break
            buf += chunk
            if len(buf) > _MAX_REQUEST_BYTES:
                raise ValueError("request too large")
        line = buf.split(b"\n", 1)[0]
        payload = json.loads(line.decode("utf-8"))
        if not isinstance(payload, dict) or not isinstance(payload.get("argv"), list):
            raise ValueError("request must be an object with an argv list")
        argv = [str(item) for item in payload["argv"]]
        cwd = payload.get("cwd")
        return argv, str(cwd) if cwd else None

    # ------------------------------------------------------------------
    # Secondary side
    # ------------------------------------------------------------------
    def forward(self, argv: Sequence[str], cwd: Optional[str]) -> bool:
        """Hand ``argv`` to the primary; False when it cannot be reached."""
        deadline = time.monotonic() + self.forward_timeout_s
        message = json.dumps({"argv": list(argv), "cwd": cwd}).encode("utf-8") + b"\n"
        while True:
            port = self._read_port()
            if port is not None:
                try:
                    with socket.create_connection(("127.0.0.1", port), timeout=self.forward_timeout_s) as conn:
                        conn.sendall(message)
                        reply = b""
                        while len(reply) < len(_ACK):
                            chunk = conn.recv(len(_ACK) - len(reply))
                            if not chunk:
                                break
                            reply += chunk
                        return reply == _ACK
                except OSError as exc:
                    self._log.debug("Forward to port %s failed: %s", port, exc)
            if time.monotonic() >= deadline:
                return False
            # The primary may hold the lock but not have published its port yet.
            time.sleep(0.05)

    def _read_port(self) -> Optional[int]:
        try:
            text = self.port_path.read_text(encoding="utf-8").strip()
        except OSError:
            return None
        return int(text) if text.isdigit() else None

    # ------------------------------------------------------------------
    def close(self) -> None:
        self._stopping.set()
        if self._server is not None:
            try:
                self._server.close()
            except OSError:
                pass
            self._server = None
        if self._handle is not None:
            try:
                self.port_path.unlink()
            except OSError:
                pass
            _unlock_file(self._handle)
            self._handle.close()
            self._handle = None


__all__ = ["LocalInstanceAdapter"]
