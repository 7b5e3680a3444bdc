"""Tkinter widgets for the home screen, the document screen and dialogs.

Views are UI-only: they expose constructor callbacks and never call
adapters or use cases directly.
"""
