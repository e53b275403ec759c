"""
Delayed reply delivery: POST the Reply to Slack's one-time response_url.

Best effort. Failures are logged; there is no retry and nothing is raised.
"""

import logging

import httpx

from app.core.config import DELIVERY_TIMEOUT
from app.schemas.slash import Reply

logger = logging.getLogger(__name__)


async def deliver_reply(
    client: httpx.AsyncClient,
    response_url: str | None,
    reply: Reply,
    timeout: float = DELIVERY_TIMEOUT,
) -> bool:
    """Return True when Slack accepted the reply. A missing response_url skips delivery."""
    if not response_url:
        logger.info("[delivery:deliver_reply] no response_url (manual call); skipping delivery")
        return False
    payload = reply.model_dump(mode="json")
    try:
        response = await client.post(response_url, json=payload, timeout=timeout)
    except (httpx.HTTPError, httpx.InvalidURL) as e:
        logger.warning("[delivery:deliver_reply] POST failed: %s", e)
        return False
    if response.status_code < 200 or response.status_code >= 300:
        logger.warning(
            "[delivery:deliver_reply] response_url returned %s: %s",
            response.status_code,
            response.text[:200],
        )
        return False
    logger.info("[delivery:deliver_reply] OUT delivered text_len=%d", len(reply.text))
    return True
