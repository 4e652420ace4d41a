# api/push.py
import asyncio
import json
import logging

from fastapi import APIRouter, Depends, Request, status
from pywebpush import WebPushException, webpush
from sqlalchemy.orm import Session

from auth_service.database import get_db
from auth_service.errors import ApiError
from auth_service.models import PushSubscription

from .schemas import PushSubscribe

logger = logging.getLogger(__name__)

push_router = APIRouter(prefix="/push", tags=["Push"])

GONE_STATUS_CODES = (404, 410)

TEST_PAYLOAD = {
    "title": "Test Notification",
    "body": "This is a test notification from the PWA!",
}


class PushNotifier:
    """Delivers Web Push messages signed with the application's VAPID keys."""

    def __init__(self, public_key, private_key, subject):
        self.public_key = public_key
        self.private_key = private_key
        self.subject = subject

    @classmethod
    def from_config(cls, config):
        return cls(config.VAPID_PUBLIC_KEY, config.VAPID_PRIVATE_KEY, config.VAPID_SUBJECT)

    def send(self, subscription_info, payload):
        return webpush(
            subscription_info=subscription_info,
            data=json.dumps(payload),
            vapid_private_key=self.private_key,
            vapid_claims={"sub": self.subject},
        )


def get_push_notifier(request: Request):
    notifier = request.app.state.push_notifier
    if notifier is None:
        raise ApiError(status.HTTP_500_INTERNAL_SERVER_ERROR, "Push notifications are not configured")
    return notifier


def is_gone(exc):
    response = getattr(exc, "response", None)
    return response is not None and response.status_code in GONE_STATUS_CODES


async def _deliver(notifier, subscription, payload):
    """Send to one subscription; return its id when the endpoint is gone."""
    loop = asyncio.get_running_loop()
    try:
        await loop.run_in_executor(None, notifier.send, subscription.subscription_info(), payload)
    except WebPushException as e:
        if is_gone(e):
            logger.info("Subscription expired/invalid, removing: %s", subscription.endpoint)
            return subscription.id
        logger.error("❌ Error sending notification to %s: %s", subscription.endpoint, e)
    except Exception as e:
        logger.error("❌ Error sending notification to %s: %s", subscription.endpoint, e)
    return None


async def broadcast(db: Session, notifier, payload):
    """Fan ``payload`` out to every stored subscription concurrently.

    Returns ``(delivered_attempts, purged)``. Subscriptions the push service
    reports as gone are deleted once every delivery has settled.
    """
    subscriptions = db.query(PushSubscription).all()
    results = await asyncio.gather(*(_deliver(notifier, sub, payload) for sub in subscriptions))

    gone_ids = [sub_id for sub_id in results if sub_id is not None]
    if gone_ids:
        db.query(PushSubscription).filter(PushSubscription.id.in_(gone_ids)).delete(synchronize_session=False)
        db.commit()
    return len(subscriptions), len(gone_ids)


@push_router.get("/vapid-key")
def get_vapid_key(request: Request):
    return {"publicKey": request.app.state.config.VAPID_PUBLIC_KEY}


@push_router.post("/subscribe", status_code=status.HTTP_201_CREATED)
def subscribe(data: PushSubscribe, db: Session = Depends(get_db)):
    existing = db.query(PushSubscription).filter(PushSubscription.endpoint == data.endpoint).first()
    if not existing:
        db.add(PushSubscription(endpoint=data.endpoint, p256dh=data.keys.p256dh, auth=data.keys.auth))
        db.commit()
    return {"message": "Subscription added successfully."}


@push_router.post("/send-test")
async def send_test(db: Session = Depends(get_db), notifier=Depends(get_push_notifier)):
    if db.query(PushSubscription).count() == 0:
        return {"message": "No subscriptions found."}

    attempted, purged = await broadcast(db, notifier, TEST_PAYLOAD)
    logger.info("Test notification sent to %d subscriptions, %d purged.", attempted, purged)
    return {"message": "Test notifications sent!"}
