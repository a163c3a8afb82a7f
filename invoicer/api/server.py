"""FastAPI app exposing the Dropbox webhook endpoint.

Response contract:
- 200 when a file was processed or there was nothing to do
- 403 only for signature failures, before any storage call
- 500 for every processing failure, without error details
- Plain-text bodies so the webhook sender only sees pass/fail
"""

from __future__ import annotations

import hmac
import json
import logging
import time

from fastapi import FastAPI, Request
from fastapi.responses import PlainTextResponse

from invoicer.api.verification import SIGNATURE_HEADER
from invoicer.core.config import Settings
from invoicer.core.errors import AuthenticationError
from invoicer.core.models import WebhookEvent
from invoicer.processing.pipeline import InvoicePipeline
from invoicer.storage.base import InMemoryKeyValueStore, KeyValueStore, RemoteFileStore
from invoicer.storage.dropbox import DropboxFileStore

logger = logging.getLogger(__name__)


def _parse_payload(body: bytes) -> dict:
    """Decode the JSON notification; an unreadable body still counts as a trigger."""

    try:
        payload = json.loads(body) if body else {}
    except (json.JSONDecodeError, UnicodeDecodeError):
        logger.warning("Webhook body is not valid JSON; treating it as a bare trigger")
        return {}
    return payload if isinstance(payload, dict) else {}


def _has_bearer_token(request: Request, token: str) -> bool:
    scheme, _, supplied = request.headers.get("authorization", "").partition(" ")
    if scheme.lower() != "bearer" or not supplied:
        return False
    return hmac.compare_digest(supplied.strip().encode("utf-8"), token.encode("utf-8"))


def create_app(
    settings: Settings,
    store: RemoteFileStore | None = None,
    state_store: KeyValueStore | None = None,
    pipeline: InvoicePipeline | None = None,
) -> FastAPI:
    """Build the webhook app around a pipeline and its collaborators."""

    if pipeline is None:
        store = store or DropboxFileStore(
            settings.dropbox_token,
            timeout=settings.http_timeout,
            list_limit=settings.list_limit,
        )
        state_store = state_store or InMemoryKeyValueStore()
        pipeline = InvoicePipeline(store, settings, state_store=state_store)

    app = FastAPI(title="invoicer", docs_url=None, redoc_url=None)
    app.state.pipeline = pipeline

    @app.get("/webhook")
    async def verify_endpoint(request: Request) -> PlainTextResponse:
        """Echo the one-time ownership challenge."""
        challenge = request.query_params.get("challenge")
        if challenge is None:
            return PlainTextResponse("Missing challenge", status_code=400)
        return PlainTextResponse(challenge, headers={"X-Content-Type-Options": "nosniff"})

    @app.post("/webhook")
    async def receive_webhook(request: Request) -> PlainTextResponse:
        """Receive a change notification and process the newest CSV."""
        start = time.time()
        body = await request.body()
        event = WebhookEvent(
            body=body,
            signature=request.headers.get(SIGNATURE_HEADER),
            payload=_parse_payload(body),
        )

        try:
            result = await pipeline.handle_webhook(event)
        except AuthenticationError:
            return PlainTextResponse("Unauthorized", status_code=403)
        except Exception:
            logger.exception("Processing error")
            return PlainTextResponse("Internal server error", status_code=500)

        logger.info(
            "Webhook handled in %.1fms: %s",
            (time.time() - start) * 1000,
            result.status.value,
        )
        return PlainTextResponse(result.message, status_code=200)

    @app.get("/health")
    async def health() -> dict:
        return {"status": "ok"}

    @app.get("/status")
    async def status(request: Request):
        """Last processing outcome per Dropbox account, for operators only.

        Hidden (404) unless ``STATUS_TOKEN`` is set; callers must send it as a
        bearer token.
        """
        if not settings.status_token:
            return PlainTextResponse("Not Found", status_code=404)
        if not _has_bearer_token(request, settings.status_token):
            logger.warning("Rejected /status request without a valid operator token")
            return PlainTextResponse("Unauthorized", status_code=401)
        if pipeline.state_store is None:
            return {"accounts": {}}
        return {"accounts": pipeline.state_store.items()}

    return app
