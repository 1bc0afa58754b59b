import asyncio
import aiohttp
from brokerage.core.logging_config import logger
from brokerage.core.config import settings


def invite_link(token: str) -> str:
    return f"{settings.INVITE_BASE_URL.rstrip('/')}/invite/{token}"


async def send_invite_notification(lot, buyer, invite, round_number: int) -> bool:
    if not settings.INVITE_WEBHOOK_URL:
        logger.debug("Invite webhook not configured, skipping notification")
        return False

    payload = {
        "lot_id": lot.id,
        "lot_title": lot.title,
        "round_number": round_number,
        "buyer_id": buyer.id,
        "buyer_name": buyer.name,
        "buyer_email": buyer.email,
        "invite_link": invite_link(invite.token),
    }

    try:
        async with aiohttp.ClientSession() as session:
            async with session.post(settings.INVITE_WEBHOOK_URL, json=payload,
                                    timeout=aiohttp.ClientTimeout(total=10)) as response:
                if response.status >= 300:
                    logger.error(f"Failed to send invite notification: HTTP {response.status}, {await response.text()}")
                    return False
                logger.info(f"Invite notification sent for lot {lot.id} to buyer {buyer.id}")
                return True
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.error(f"Error sending invite notification for lot {lot.id} to buyer {buyer.id}: {str(e)}")
        return False
