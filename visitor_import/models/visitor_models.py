"""
Visitor-related data models.

Storage-independent views of the rows the import writes. Repositories convert
their database rows into these models.
"""

from datetime import datetime
from typing import Optional, Set

from pydantic import BaseModel, Field


class Visitor(BaseModel):
    """A deduplicated identity keyed by network address."""
    address: str = Field(description="Network address of the visitor")
    visit_count: int = Field(default=0, ge=0, description="Number of recorded visits")
    whitelist: Set[str] = Field(default_factory=set, description="Addresses exempt from visit logging")
    created_at: Optional[datetime] = Field(default=None, description="When the visitor row was created")

    def ignores(self, address: str) -> bool:
        """Check whether visits from *address* are exempt from logging."""
        return address in self.whitelist


class Visit(BaseModel):
    """One recorded request attributed to a visitor."""
    address: str = Field(description="Address of the owning visitor")
    request: str = Field(description="Request target (path and query string)")
    referrer: Optional[str] = Field(default=None, description="Referring URL, if any")
    user_agent: str = Field(default="", description="User-Agent header")
    created_at: datetime = Field(description="Request time taken from the log line (UTC)")


class UserAgentStat(BaseModel):
    """Occurrence count of one user-agent string."""
    user_agent: str = Field(description="Exact user-agent string")
    count: int = Field(default=0, ge=0, description="Number of visits carrying this agent")
    browser: str = Field(default="Unknown", description="Browser family")
    os: str = Field(default="Unknown", description="Operating system family")
    device: str = Field(default="Desktop", description="Device class")
