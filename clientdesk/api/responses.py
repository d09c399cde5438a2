"""
Response helpers shared by the v1 routers
"""
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from clientdesk.application.mutations import MutationResult
from clientdesk.application.notifications import CollectingNotifier


def mutation_response(result: MutationResult, notifier: CollectingNotifier) -> JSONResponse:
    """
    {"ok", "data", "notifications"}; a failed write answers 502 so clients
    can tell it apart without parsing the body.
    """
    body = {
        "ok": result.ok,
        "data": result.data,
        "notifications": [t.to_dict() for t in notifier.toasts],
    }
    return JSONResponse(
        status_code=200 if result.ok else 502,
        content=jsonable_encoder(body),
    )
