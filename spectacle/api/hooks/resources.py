"""Webhook endpoint resource.

``POST /hook`` reads the raw request body, hands it to the
:class:`~spectacle.hooks.service.HookIntake` and answers ``202 Accepted``
with the routing outcome. Rejections raised by the intake are translated by
the handlers in :mod:`spectacle.api.errors`.

Usage
-----
Register the resource on the Falcon app::

    app.add_route(HOOK_PATH, HookResource(intake))

"""

from __future__ import annotations

import typing as typ

import falcon

from spectacle.hooks.router import EVENT_HEADER, HookRequest

if typ.TYPE_CHECKING:
    from falcon.asgi import Request, Response

    from spectacle.hooks.service import HookIntake

__all__ = ["HookResource"]


class HookResource:
    """Resource accepting signed webhook deliveries."""

    def __init__(self, intake: HookIntake) -> None:
        """Configure the resource with the intake that routes requests.

        Parameters
        ----------
        intake
            Service that authenticates requests and queues builds.

        """
        self._intake = intake

    async def on_post(self, req: Request, resp: Response) -> None:
        """Handle POST /hook.

        The body is read as raw bytes so the signature is checked against
        exactly what was sent.

        Parameters
        ----------
        req
            Falcon request carrying the webhook delivery.
        resp
            Falcon response populated with the routing outcome.

        """
        body = await req.stream.read()
        request = HookRequest(
            path=req.path,
            method=req.method,
            content_type=req.content_type,
            signature=req.get_header(self._intake.router.signature_header),
            event=req.get_header(EVENT_HEADER),
            body=body,
        )
        decision = self._intake.handle(request)
        resp.status = falcon.HTTP_202
        resp.media = {"outcome": decision.outcome.value}
