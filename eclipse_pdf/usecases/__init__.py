"""Use-case layer for the session lifecycle and trial entitlement.

Modules coordinate domain objects and ports without performing transport
I/O directly; adapters are injected by ``eclipse_pdf.app``.
"""
