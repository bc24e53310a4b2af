"""
User-agent based filtering of automated clients.

This is a heuristic that raises the cost of casual scripting, not a
security boundary.
"""

from typing import Iterable, Optional

from transgate.errors import ErrorKind, Rejection

BOT_KEYWORDS = ("bot", "spider", "crawler", "slurp", "curl", "wget", "python-requests")


def check_access(user_agent: Optional[str], keywords: Iterable[str] = BOT_KEYWORDS) -> Optional[Rejection]:
    """Return a Rejection if the user agent looks like automated tooling."""
    ua = (user_agent or "").lower()

    for keyword in keywords:
        if keyword in ua:
            return Rejection(ErrorKind.ACCESS, f"Automated clients are not allowed: {user_agent}")

    return None
