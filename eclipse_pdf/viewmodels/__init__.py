"""ViewModel package for UI state and command surfaces.

Modules here depend on domain types and ports only; adapters and Tk widgets
stay in ``eclipse_pdf.adapters`` and ``eclipse_pdf.app``.
"""
