"""
Header names and small helpers shared by the policy middlewares.
"""

import math
from datetime import datetime, timedelta, timezone
from email.utils import format_datetime

from starlette.datastructures import MutableHeaders

STRICT_TRANSPORT_SECURITY = "Strict-Transport-Security"
CONTENT_SECURITY_POLICY = "Content-Security-Policy"
CONTENT_SECURITY_POLICY_REPORT_ONLY = "Content-Security-Policy-Report-Only"
CACHE_CONTROL = "Cache-Control"
EXPIRES = "Expires"
X_CONTENT_TYPE_OPTIONS = "X-Content-Type-Options"
X_FRAME_OPTIONS = "X-Frame-Options"
X_REQUEST_ID = "X-Request-ID"

# Headers that reveal the server or framework behind the application
INSECURE_HEADERS = ("Server", "X-Powered-By", "X-AspNet-Version", "X-AspNetMvc-Version")

NO_CACHE = "no-cache, no-store, must-revalidate"


def max_age_seconds(duration: timedelta) -> int:
    """Whole seconds in `duration`, rounding any fraction up."""
    return math.ceil(duration.total_seconds())


def format_http_date(moment: datetime) -> str:
    """RFC 1123 date, e.g. ``Sun, 06 Nov 1994 08:49:37 GMT``.

    email.utils uses fixed English day/month names, so the output does not
    depend on the process locale.
    """
    return format_datetime(moment.astimezone(timezone.utc), usegmt=True)


def expires_after(seconds: int, now: datetime | None = None) -> str:
    now = now or datetime.now(timezone.utc)
    return format_http_date(now + timedelta(seconds=seconds))


def remove_header(headers: MutableHeaders, name: str) -> None:
    """Drop every occurrence of `name`; a missing header is not an error."""
    if name in headers:
        del headers[name]


def replace_header(headers: MutableHeaders, name: str, value: str) -> None:
    """Remove all existing values for `name`, then append exactly one."""
    remove_header(headers, name)
    headers.append(name, value)


def is_html(headers: MutableHeaders) -> bool:
    content_type = headers.get("content-type", "")
    return content_type.split(";", 1)[0].strip().lower() == "text/html"


def charset_of(headers: MutableHeaders, default: str = "utf-8") -> str:
    for param in headers.get("content-type", "").split(";")[1:]:
        key, _, value = param.strip().partition("=")
        if key.lower() == "charset" and value:
            return value.strip('"')
    return default
