# src/interfaces/api/main.py
"""FastAPI application exposing the StackStorm result webhook.

StackStorm posts asynchronous execution results to POST /hubot/st2; they are
decoded by the engine's InboundNotifier and delivered through a ChatSender.
The webhook always answers HTTP 200 and reports decoding problems in the
JSON body.
"""

import logging
import uuid
from typing import Annotated, Any

from fastapi import Depends, FastAPI, Request
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from src.core.aliases.errors import WebhookPayloadError
from src.core.engine import ChatOpsEngine
from src.core.notification import ChatSender
from src.interfaces.api.schemas import AliasListResponse, WebhookResponse
from src.interfaces.api.security import (
    ApiKeyVerifier,
    build_limiter,
    rate_limit_for,
)
from src.utils.logging import set_request_id

logger = logging.getLogger(__name__)

WEBHOOK_PATH = "/hubot/st2"
FORM_CONTENT_TYPES = ("application/x-www-form-urlencoded", "multipart/form-data")


async def _read_body(request: Request) -> Any:
    """Return the form fields for form posts, otherwise the raw body bytes."""
    content_type = request.headers.get("content-type", "")
    if content_type.startswith(FORM_CONTENT_TYPES):
        form = await request.form()
        return dict(form)
    return await request.body()


def create_app(
    engine: ChatOpsEngine, chat_sender: ChatSender | None = None
) -> FastAPI:
    """Create the webhook application.

    Args:
        engine: Alias engine used to decode result payloads.
        chat_sender: Delivery for decoded messages. May be set later through
            ``app.state.chat_sender`` once the chat adapter is connected.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="StackStorm ChatOps Bot",
        description="Result webhook and alias listing for the ChatOps bot",
        version="1.0.0",
    )
    app.state.engine = engine
    app.state.chat_sender = chat_sender
    limiter = build_limiter()
    rate_limit = rate_limit_for(engine.settings)
    ApiKey = Annotated[str, Depends(ApiKeyVerifier(engine.settings.api_auth_key))]

    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    @app.post(WEBHOOK_PATH, response_model=WebhookResponse)
    async def post_result(request: Request) -> WebhookResponse:
        """Deliver a StackStorm result to chat.

        Accepts a form field ``payload`` holding JSON, or a raw JSON body.
        """
        set_request_id(str(uuid.uuid4()))

        try:
            raw = await _read_body(request)
            message = engine.handle_result(raw)
        except WebhookPayloadError as e:
            logger.error("%s", e)
            return WebhookResponse(
                status="failed",
                msg=f"An error occurred trying to post the message: {e}",
            )
        except Exception as e:
            logger.exception("Unexpected error reading webhook body")
            return WebhookResponse(
                status="failed",
                msg=f"An error occurred trying to post the message: {e}",
            )

        sender: ChatSender | None = app.state.chat_sender
        if sender is None:
            logger.error(
                "No chat adapter connected, dropping message for %s", message.recipient
            )
            return WebhookResponse(
                status="failed", msg="No chat adapter connected to post the message"
            )

        if await sender.send(message.recipient, message.text) is None:
            return WebhookResponse(
                status="failed",
                msg=f"Could not post the message to {message.recipient}",
            )

        logger.info("Posted result to %s", message.recipient)
        return WebhookResponse(status="completed", msg="Message posted successfully")

    @app.get("/aliases", response_model=AliasListResponse)
    @limiter.limit(rate_limit)
    async def list_aliases(request: Request, _api_key: ApiKey) -> AliasListResponse:
        """List the commands in the current registry snapshot."""
        snapshot = engine.registry.current_snapshot()
        return AliasListResponse(
            generation=engine.registry.generation,
            aliases=len(snapshot.aliases),
            commands=snapshot.help_lines(engine.settings.bot_name),
        )

    @app.get("/health")
    @limiter.limit(rate_limit)
    async def health_check(request: Request) -> dict[str, Any]:
        """Health check endpoint.

        Returns:
            Dictionary with health status and registry state.
        """
        return {
            "status": "healthy",
            "commands_loaded": not engine.registry.is_empty(),
            "chat_connected": app.state.chat_sender is not None,
        }

    return app
