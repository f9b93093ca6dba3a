import json
from fastapi import APIRouter, Depends, Request
from fastapi.responses import PlainTextResponse
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
from app.application.webhooks import ERROR, reconcile_payment_event
from app.infrastructure.db import get_db
from shared.core import get_logger

router = APIRouter(prefix="/api/yookassa", tags=["payments"])
logger = get_logger(__name__)

@router.post("/webhook", response_class=PlainTextResponse)
async def yookassa_webhook(request: Request, db: Session = Depends(get_db)):
    """Always 200: a non-2xx answer only makes the provider redeliver."""
    body = await request.body()
    try:
        event = json.loads(body or b"null")
    except ValueError:
        logger.warning("Webhook body is not valid JSON")
        return PlainTextResponse(ERROR)

    try:
        outcome = await run_in_threadpool(reconcile_payment_event, db, event)
    except Exception:
        logger.error("Webhook processing failed", exc_info=True)
        try:
            await run_in_threadpool(db.rollback)
        except Exception:
            logger.error("Webhook rollback failed", exc_info=True)
        return PlainTextResponse(ERROR)
    return PlainTextResponse(outcome)
