# tests/property/__init__.py
"""Property-based tests for httpwindow.

Property-based testing validates invariants that must hold for ALL inputs,
such as exactly-once delivery under any completion order.
"""
