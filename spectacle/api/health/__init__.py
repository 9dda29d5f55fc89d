"""Liveness and readiness probes.

Usage
-----
Import health resources for route registration::

    from spectacle.api.health.resources import HealthResource, ReadyResource
"""
