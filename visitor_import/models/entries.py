"""
Parsed access-log entry model.

This module contains the Pydantic model produced by the line parser for each
Apache combined log line.
"""

from datetime import datetime
from typing import Optional
from urllib.parse import urlsplit

from pydantic import BaseModel, Field

APACHE_TIME_FORMAT = "%d/%b/%Y:%H:%M:%S %z"


class LogEntry(BaseModel):
    """One request as recorded by the web server."""
    host: Optional[str] = Field(default=None, description="Remote address (%h); None when empty or '-'")
    identity: str = Field(default="-", description="RFC 1413 identity (%l)")
    user: str = Field(default="-", description="Authenticated user (%u)")
    timestamp: datetime = Field(description="Request time (%t), timezone aware")
    request: str = Field(description="Raw first line of the request (%r)")
    method: Optional[str] = Field(default=None, description="HTTP method, when the request line is well formed")
    target: Optional[str] = Field(default=None, description="Request target (path and query)")
    protocol: Optional[str] = Field(default=None, description="HTTP protocol version")
    status: Optional[int] = Field(default=None, description="Final status code (%>s)")
    bytes_sent: Optional[int] = Field(default=None, description="Response size (%b); None for '-'")
    referrer: Optional[str] = Field(default=None, description="Referer header; None for '-' or empty")
    user_agent: str = Field(default="", description="User-Agent header")

    @property
    def path(self) -> Optional[str]:
        """Path component of the request target, without the query string."""
        if self.target is not None:
            return urlsplit(self.target).path
        parts = self.request.split()
        if len(parts) >= 2 and parts[1].startswith("/"):
            return urlsplit(parts[1]).path
        return None

    @property
    def request_path(self) -> str:
        """Value stored on a visit: the request target.

        For request lines that are not ``METHOD TARGET PROTOCOL`` the second
        token is used; the raw line is kept only when there is none.
        """
        if self.target is not None:
            return self.target
        parts = self.request.split()
        if len(parts) >= 2:
            return parts[1]
        return self.request

    def format_line(self) -> str:
        """Render the entry back into Apache combined log format."""
        status = "-" if self.status is None else str(self.status)
        size = "-" if self.bytes_sent is None else str(self.bytes_sent)
        return (
            f'{self.host or "-"} {self.identity} {self.user} '
            f'[{self.timestamp.strftime(APACHE_TIME_FORMAT)}] '
            f'"{self.request}" {status} {size} '
            f'"{self.referrer or "-"}" "{self.user_agent}"'
        )
