"""Adapter package for external I/O implementations.

Purpose:
    Concrete implementations of the domain ports: JSON files in the data
    directory, the licensing backend over HTTP, the single-instance lock and
    forwarding channel, and an offline backend stand-in.

Dependencies:
    ``backend_rest`` and ``http_client`` depend on ``requests``; the rest use
    the filesystem and sockets only.

Call context:
    Imported by ``eclipse_pdf.app`` for runtime wiring and by tests.
"""
