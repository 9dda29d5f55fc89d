"""Spectacle: a self-hosted GitHub webhook build trigger.

Incoming push notifications are authenticated against per-repository HMAC
secrets, routed by event kind, and turned into build jobs that a single
worker executes one at a time under a restricted system identity.
"""

from __future__ import annotations

__version__ = "0.2.0"
