"""
Apache Combined Log Parsing

Turns one raw line in the format
``%h %l %u %t "%r" %>s %b "%{Referer}i" "%{User-Agent}i"`` into a
:class:`~visitor_import.models.LogEntry`.
"""

import ipaddress
import re
from typing import Optional

from apachelogs import InvalidEntryError, LogParser

from .errors import LineParseError
from .models import LogEntry

# see: https://github.com/jwodder/apachelogs
COMBINED_FORMAT = '%h %l %u %t "%r" %>s %b "%{Referer}i" "%{User-Agent}i"'

_HOST_LABEL = re.compile(r"^(?!-)[A-Za-z0-9-]{1,63}(?<!-)$")


def _optional(value: Optional[str]) -> Optional[str]:
    """Map Apache's absent markers to None."""
    if value in (None, "", "-"):
        return None
    return value


def usable_host(value: Optional[str]) -> Optional[str]:
    """Return *value* if it is an IP address or a dotted host name, else None."""
    value = _optional(value)
    if value is None:
        return None
    try:
        return str(ipaddress.ip_address(value))
    except ValueError:
        pass
    labels = value.rstrip(".").split(".")
    if len(labels) < 2 or len(value) > 253:
        return None
    if not all(_HOST_LABEL.match(label) for label in labels):
        return None
    return value.lower()


class LineParser:
    """Parser for Apache combined log lines."""

    format = COMBINED_FORMAT

    def __init__(self):
        self._parser = LogParser(COMBINED_FORMAT)

    def parse(self, line: str) -> LogEntry:
        """Parse *line* into a LogEntry.

        Args:
            line: One raw log line, with or without the trailing newline

        Returns:
            The parsed entry. ``host`` is None when the line carries no usable
            remote address.

        Raises:
            LineParseError: If the line does not have the combined format or
                one of its fields cannot be read
        """
        line = line.rstrip("\r\n")
        try:
            parsed = self._parser.parse(line)
        except (InvalidEntryError, ValueError) as exc:
            raise LineParseError(f"Line does not match the combined log format: {exc}", line) from exc

        request = parsed.request_line if parsed.request_line is not None else "-"
        method = target = protocol = None
        parts = request.split(" ")
        if len(parts) == 3 and all(parts):
            method, target, protocol = parts

        return LogEntry(
            host=usable_host(parsed.remote_host),
            identity=parsed.remote_logname or "-",
            user=parsed.remote_user or "-",
            timestamp=parsed.request_time,
            request=request,
            method=method,
            target=target,
            protocol=protocol,
            status=parsed.final_status,
            bytes_sent=parsed.bytes_sent,
            referrer=_optional(parsed.headers_in["Referer"]),
            user_agent=parsed.headers_in["User-Agent"] or "",
        )
