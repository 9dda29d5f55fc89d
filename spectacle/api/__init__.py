"""Spectacle HTTP API layer.

This package provides the Falcon Asynchronous Server Gateway Interface
(ASGI) application serving the webhook endpoint and health probes.

Usage
-----
Create the application::

    from spectacle.api import AppDependencies, create_app

    app = create_app()                                   # health-only
    app = create_app(AppDependencies(intake, worker))    # webhook intake

"""

from spectacle.api.app import AppDependencies, create_app

__all__ = ["AppDependencies", "create_app"]
