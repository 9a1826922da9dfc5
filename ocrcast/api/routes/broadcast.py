"""
Subscriber endpoints: direct broadcast and the WebSocket feed.
"""

from fastapi import APIRouter, Request, Response, WebSocket

from ocrcast.observability.logging import get_logger
from ocrcast.observability.metrics import get_metrics
from ocrcast.api.schemas import ErrorResponse
from ocrcast.errors import InvalidRequestError

router = APIRouter()
logger = get_logger(__name__)


@router.post(
    "/api/v1/broadcast",
    responses={400: {"model": ErrorResponse}},
    summary="Broadcast text",
    description="Send the UTF-8 request body to every connected subscriber as-is."
)
async def broadcast_text(request: Request):
    body = await request.body()
    try:
        text = body.decode("utf-8")
    except UnicodeDecodeError as e:
        raise InvalidRequestError("Body is not valid UTF-8", {"position": e.start})

    request.app.state.broadcaster.send_message(text)
    get_metrics().record_delivery(len(text))
    return Response(status_code=200)


@router.websocket("/ws")
async def subscribe(websocket: WebSocket):
    """Receive every message delivered after the connection opens."""
    await websocket.app.state.broadcaster.serve(websocket)
