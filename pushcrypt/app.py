"""
HTTP service exposing the push encryption pipeline.

Run with: uvicorn pushcrypt.app:app
"""
from __future__ import annotations

import logging
import time

from fastapi import Depends, FastAPI, HTTPException, Request
from pydantic import BaseModel

from pushcrypt.config import Settings, get_settings
from pushcrypt.encryption import EncryptionHelper
from pushcrypt.engine import get_engine
from pushcrypt.errors import PushDeliveryError
from pushcrypt.subscription import SubscriptionInfo
from pushcrypt.transport import send_request

logging.basicConfig(level=get_settings().log_level)
logger = logging.getLogger(__name__)

app = FastAPI(title="pushcrypt")


# Request logging middleware
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = time.time()
    try:
        response = await call_next(request)
        duration = time.time() - start_time
        logger.info("%s %s - Status: %d - Duration: %.2fs",
                    request.method, request.url.path, response.status_code, duration)
        return response
    except Exception as e:
        duration = time.time() - start_time
        logger.error("%s %s - Error: %s: %s - Duration: %.2fs",
                     request.method, request.url.path, type(e).__name__, e, duration)
        raise


# =============================================================================
# Request/Response Models
# =============================================================================

class PushRequest(BaseModel):
    subscription: SubscriptionInfo
    payload: str = ""  # UTF-8 text; empty sends a notification without data


class RequestDetailsResponse(BaseModel):
    url: str
    method: str
    headers: dict[str, str]
    body: str | None  # base64url


class SendResponse(BaseModel):
    delivered: bool
    status_code: int


# =============================================================================
# Routes
# =============================================================================

@app.get("/health")
def health():
    return {"status": "ok"}


@app.get("/vapid-public-key")
def vapid_public_key(engine: EncryptionHelper = Depends(get_engine)):
    """applicationServerKey for PushManager.subscribe() in the browser."""
    return {"publicKey": engine.vapid_keys.b64_public_key}


@app.post("/request-details", response_model=RequestDetailsResponse)
def request_details(body: PushRequest, engine: EncryptionHelper = Depends(get_engine)):
    """Encrypt a payload and return the request the caller should send."""
    try:
        subscription = body.subscription.to_subscription()
        request = engine.build_request(subscription, body.payload.encode('utf-8'))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return request.to_json()


@app.post("/send", response_model=SendResponse)
async def send(
    body: PushRequest,
    engine: EncryptionHelper = Depends(get_engine),
    settings: Settings = Depends(get_settings),
):
    """Encrypt a payload and deliver it to the push service."""
    try:
        subscription = body.subscription.to_subscription()
        request = engine.build_request(subscription, body.payload.encode('utf-8'))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    try:
        result = await send_request(request, settings=settings)
    except PushDeliveryError as e:
        raise HTTPException(status_code=502, detail=str(e))
    return SendResponse(delivered=result.delivered, status_code=result.status_code)
