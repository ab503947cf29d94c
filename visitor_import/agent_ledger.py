"""
User Agent Ledger

Deduplicates user-agent strings and keeps an occurrence count for each,
classifying new agents into browser, operating system and device families.
"""

from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError

from .batching import TransactionContext
from .errors import TransientPersistenceError
from .models import UserAgentStat
from .storage import UserAgentRepository


def classify(user_agent: str) -> Dict[str, str]:
    """Extract browser, OS and device families from a user-agent string.

    Args:
        user_agent: User agent string

    Returns:
        Dictionary with browser, os, and device information
    """
    if not user_agent:
        return {"browser": "Unknown", "os": "Unknown", "device": "Unknown"}

    browser = "Unknown"
    os_info = "Unknown"
    device = "Desktop"

    if "Edg" in user_agent:
        browser = "Edge"
    elif "OPR" in user_agent or "Opera" in user_agent:
        browser = "Opera"
    elif "Chrome" in user_agent:
        browser = "Chrome"
    elif "Firefox" in user_agent:
        browser = "Firefox"
    elif "Safari" in user_agent:
        browser = "Safari"
    elif "bot" in user_agent.lower() or "spider" in user_agent.lower():
        browser = "Bot"

    # Android and iOS user agents also mention Linux / Mac OS X
    if "Android" in user_agent:
        os_info = "Android"
    elif "iPhone" in user_agent or "iPad" in user_agent:
        os_info = "iOS"
    elif "Windows" in user_agent:
        os_info = "Windows"
    elif "Mac OS X" in user_agent or "MacOS" in user_agent:
        os_info = "macOS"
    elif "Linux" in user_agent:
        os_info = "Linux"

    if "iPad" in user_agent or "Tablet" in user_agent:
        device = "Tablet"
    elif "Mobile" in user_agent or "Android" in user_agent or "iPhone" in user_agent:
        device = "Mobile"

    return {
        "browser": browser,
        "os": os_info,
        "device": device
    }


class UserAgentLedger:
    """Counts distinct user agents across an import run."""

    def __init__(self, repository: Optional[UserAgentRepository] = None):
        self.repository = repository or UserAgentRepository()

    def record(self, ctx: TransactionContext, user_agent: str) -> UserAgentStat:
        """Count one visit carrying *user_agent*.

        Raises:
            TransientPersistenceError: If the counter cannot be written
        """
        try:
            stat = self.repository.increment(ctx.session, user_agent)
            if stat is None:
                stat = self.repository.create(
                    ctx.session,
                    UserAgentStat(user_agent=user_agent, count=1, **classify(user_agent)),
                )
        except SQLAlchemyError as exc:
            raise TransientPersistenceError(f"Could not record user agent: {exc}") from exc
        return stat
