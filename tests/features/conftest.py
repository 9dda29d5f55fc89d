"""Shared fixtures for BDD feature tests.

Feature steps reuse the fixtures from ``tests/conftest.py``.
"""
