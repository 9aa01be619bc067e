"""Routing — version-aware route table and request dispatch.

Bindings are registered during setup and compiled into an immutable
lookup structure when the app freezes.
"""
