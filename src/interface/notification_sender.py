"""Push delivery of reminder notifications to a webhook, with retry logic."""

import asyncio
import logging

import httpx

from src.core.config import constants, settings
from src.models.service_models import NotificationRequest, NotificationResult


logger = logging.getLogger(__name__)


# HTTP status code constants for error handling
HTTP_CLIENT_ERROR_START = 400
HTTP_CLIENT_ERROR_END = 500


def build_payload(request: NotificationRequest) -> dict[str, str | int]:
    """JSON body posted to the webhook."""
    return {
        "taskId": request.task_id,
        "notificationId": request.notification_id,
        "title": request.title,
        "body": request.body,
        "channelId": request.channel_id,
        "notifyAt": request.notify_at.isoformat(),
    }


def _extract_message_id(response: httpx.Response) -> str | None:
    try:
        data = response.json()
    except ValueError:
        return None
    if isinstance(data, dict) and data.get("id") is not None:
        return str(data["id"])
    return None


async def send_reminder(
    *,
    request: NotificationRequest,
    max_retries: int = 3,
    retry_delay: float = 1.0,
) -> NotificationResult:
    """POST a reminder to the configured webhook.

    Client errors (4xx) are not retried; server errors and transport
    failures are retried with exponential backoff.
    """
    if not settings.notification_webhook_url:
        logger.info(
            "Reminder due but no webhook configured",
            extra={"task_id": request.task_id, "title": request.title, "body": request.body},
        )
        return NotificationResult(task_id=request.task_id, success=False, error="Notification webhook not configured")

    headers = {"Content-Type": "application/json"}
    if settings.notification_webhook_token:
        headers["Authorization"] = f"Bearer {settings.notification_webhook_token}"

    payload = build_payload(request)

    for attempt in range(max_retries):
        try:
            async with httpx.AsyncClient(timeout=constants.API_TIMEOUT_SECONDS) as client:
                response = await client.post(settings.notification_webhook_url, json=payload, headers=headers)

                if response.is_success:
                    return NotificationResult(
                        task_id=request.task_id,
                        success=True,
                        message_id=_extract_message_id(response),
                    )

                if HTTP_CLIENT_ERROR_START <= response.status_code < HTTP_CLIENT_ERROR_END:
                    return NotificationResult(
                        task_id=request.task_id,
                        success=False,
                        error=f"Client error: {response.status_code} {response.text}",
                    )

                raise httpx.HTTPStatusError(
                    f"Server error: {response.status_code}", request=response.request, response=response
                )
        except httpx.HTTPError as e:
            logger.warning(
                "Reminder delivery attempt %d/%d failed: %s",
                attempt + 1,
                max_retries,
                e,
                extra={"task_id": request.task_id},
            )
            if attempt < max_retries - 1:
                await asyncio.sleep(retry_delay * (2**attempt))
            else:
                return NotificationResult(
                    task_id=request.task_id,
                    success=False,
                    error=f"Failed after retries: {e!s}",
                )

    return NotificationResult(task_id=request.task_id, success=False, error="Max retries exceeded")
