"""Routing — an ordered, exact-match route table.

Routes are registered during setup and frozen into an immutable
table when the app freezes.
"""
