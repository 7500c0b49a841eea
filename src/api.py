import json
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
import opik
from pydantic import ValidationError

from src.config import AppConfig
from src.builder import WorkflowBuilder
from src.core.email_content import render_test_email
from src.core.errors import AuthenticationRequiredError, RecordStoreError
from src.core.models import DeliveryRequest, DriverIdentity, PODEmailRequest
from src.notifier import NotificationStatus

logger = logging.getLogger("pod_service.api")

SENDGRID_ACTIVITY_URL = "https://app.sendgrid.com/email_activity"

TROUBLESHOOTING = {
    "400": "Bad request - check sender email is verified",
    "401": "Invalid API key - check SENDGRID_API_KEY",
    "403": "Forbidden - sender email not verified or account suspended",
    "429": "Rate limit exceeded - wait and try again",
}


def _bearer_token(request: Request) -> str | None:
    header = request.headers.get("authorization", "")
    scheme, _, token = header.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        return None
    return token.strip()


def _validation_message(error: ValidationError) -> str:
    problems = []
    for err in error.errors():
        location = ".".join(str(part) for part in err["loc"])
        problems.append(f"{location}: {err['msg']}" if location else err["msg"])
    return "Invalid request body: " + "; ".join(problems)


def create_app(config: AppConfig | None = None) -> FastAPI:
    """Factory function for creating the FastAPI app with config.

    Run with: uvicorn src.api:create_app --factory
    """
    if config is None:
        config = AppConfig.from_yaml()

    builder = WorkflowBuilder(config)
    workflow = builder.build()
    records = builder.records
    notifier = builder.notifier
    email_sender = builder.email_sender

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        builder.close()

    app = FastAPI(title="POD Delivery Service", lifespan=lifespan)

    def authenticate(request: Request) -> DriverIdentity:
        token = _bearer_token(request)
        try:
            driver = records.get_user(token) if token else None
        except RecordStoreError as e:
            # An unverifiable session is treated like a missing one
            logger.error(f"Session lookup failed: {e}")
            driver = None
        if driver is None:
            raise AuthenticationRequiredError("Authentication required")
        return driver

    @opik.track(name="delivery_workflow")
    def run_delivery(delivery: DeliveryRequest, driver: DriverIdentity) -> dict:
        input_state = {
            "order_id": delivery.order_id,
            "driver_id": driver.id,
            "photo_data": delivery.photo_data,
            "signature_data": delivery.signature_data,
            "recipient_name": delivery.recipient_name,
            "notes": delivery.notes,
            "trajectory": [],
        }
        result = workflow.invoke(input_state)
        logger.info(
            f"Delivery workflow completed: order_id={delivery.order_id} status={result.get('final_status')} "
            f"pod_id={result.get('pod_id')} notification={result.get('notification_status')}"
        )
        return result

    @app.post("/api/driver/deliver")
    async def submit_delivery(request: Request):
        """Record proof of delivery, mark the order delivered and email the customer.

        The caller is authenticated before the body is read, so an anonymous
        request is rejected with 401 whatever it contains.
        """
        order_id = None
        try:
            try:
                driver = await run_in_threadpool(authenticate, request)
            except AuthenticationRequiredError as e:
                logger.warning(f"Rejected delivery submission: {e}")
                return JSONResponse(status_code=401, content={"success": False, "error": str(e)})

            body = await request.body()
            try:
                delivery = DeliveryRequest.model_validate(json.loads(body))
            except ValidationError as e:
                return JSONResponse(status_code=400, content={"success": False, "error": _validation_message(e)})
            except ValueError:
                return JSONResponse(status_code=400, content={"success": False, "error": "Request body must be JSON"})

            order_id = delivery.order_id
            logger.info(f"Delivery submitted: order_id={order_id} driver_id={driver.id}")
            result = await run_in_threadpool(run_delivery, delivery, driver)
            if result.get("final_status") == "error":
                return JSONResponse(
                    status_code=500,
                    content={"success": False, "error": result.get("error_message", "Delivery failed")},
                )
            return {"success": True}
        except Exception as e:
            logger.exception(f"Unexpected error confirming delivery for order {order_id}")
            return JSONResponse(
                status_code=500,
                content={"success": False, "error": str(e) or "An unexpected error occurred"},
            )

    @app.post("/api/pod-email")
    def send_pod_email(body: PODEmailRequest):
        """Send the POD email for an order on its own. Idempotent per POD."""
        try:
            if not body.order_id or not body.pod_id:
                return JSONResponse(status_code=400, content={"ok": False, "error": "orderId and podId are required"})

            logger.info(f"POD email requested: order_id={body.order_id} pod_id={body.pod_id}")
            outcome = notifier.notify(body.order_id, body.pod_id)
            status = outcome.status

            if status == NotificationStatus.SENT:
                return {"ok": True, "status": outcome.provider_status, "messageId": outcome.message_id}
            if status == NotificationStatus.ALREADY_SENT:
                return {"ok": True, "alreadySent": True}
            if status == NotificationStatus.NO_CUSTOMER_EMAIL:
                return {"ok": True, "skipped": True, "reason": outcome.error}
            if status in (NotificationStatus.ORDER_NOT_FOUND, NotificationStatus.POD_NOT_FOUND):
                return JSONResponse(status_code=400, content={"ok": False, "error": outcome.error})
            if status == NotificationStatus.NOT_CONFIGURED:
                return JSONResponse(status_code=500, content={"ok": False, "error": outcome.error})
            return JSONResponse(
                status_code=500,
                content={"ok": False, "status": outcome.provider_status, "error": outcome.error},
            )
        except Exception as e:
            logger.exception(f"Unhandled error sending POD email for order {body.order_id}")
            return JSONResponse(status_code=500, content={"ok": False, "error": str(e) or type(e).__name__})

    @app.get("/api/test-email")
    def send_test_email(to: str | None = None):
        """Send a diagnostic email to check provider configuration."""
        if not to:
            return JSONResponse(status_code=400, content={"error": "Missing ?to=email@example.com parameter"})

        logger.info(f"Test email requested: to={to}")
        if not email_sender.is_configured:
            error = email_sender.configuration_error
            setting = error.split(" ", 1)[0]
            return JSONResponse(
                status_code=500,
                content={"error": error, "help": f"Add {setting} to environment variables"},
            )

        try:
            content = render_test_email(email_sender.from_email, to)
            result = email_sender.send(to=to, subject=content.subject, html=content.html)
        except Exception as e:
            logger.exception("Test email failed")
            return JSONResponse(status_code=500, content={"error": "Failed to send test email", "details": str(e)})

        if result.success:
            return {
                "success": True,
                "status": result.status_code,
                "message": "Test email sent successfully!",
                "messageId": result.message_id,
                "to": to,
                "from": email_sender.from_email,
                "instructions": [
                    "1. Check your inbox (and spam folder)",
                    "2. If email is in spam, verify your sender domain in SendGrid",
                    "3. Track this email in SendGrid dashboard using the message ID above",
                    f"4. Go to: {SENDGRID_ACTIVITY_URL}",
                ],
            }

        if result.status_code is None:
            return JSONResponse(
                status_code=500,
                content={"error": "Failed to send test email", "details": result.error},
            )
        return JSONResponse(
            status_code=result.status_code,
            content={
                "error": "SendGrid API error",
                "status": result.status_code,
                "details": result.error,
                "troubleshooting": TROUBLESHOOTING,
            },
        )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    return app
