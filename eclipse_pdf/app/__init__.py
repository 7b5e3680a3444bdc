"""Application composition layer for the Tkinter GUI.

The orchestrator and controller in this package wire views, view models,
adapters and use cases into the running desktop session.
"""
