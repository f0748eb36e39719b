"""
Option models for each header policy.

Built once at startup and shared read-only by every request, so all of
them are frozen. Constructing a model without arguments gives the
defaults used by the corresponding `use_*` registration call.
"""

from datetime import timedelta

from pydantic import BaseModel, ConfigDict, Field, field_validator

NONCE_PLACEHOLDER = "{nonce}"

# Extensions treated as static assets by CacheControlMiddleware
DEFAULT_STATIC_FILE_EXTENSIONS = frozenset({
    ".css", ".js", ".mjs", ".map",
    ".png", ".jpg", ".jpeg", ".gif", ".webp", ".avif", ".svg", ".ico",
    ".woff", ".woff2", ".ttf", ".otf", ".eot",
    ".mp4", ".webm", ".mp3", ".wav",
    ".pdf", ".txt", ".xml", ".json", ".webmanifest", ".wasm",
})


class _Options(BaseModel):
    model_config = ConfigDict(frozen=True)


# Keeps now + max-age inside datetime's range when Expires is computed
MAX_DURATION = timedelta(days=365 * 100)


def _bounded_duration(value: timedelta) -> timedelta:
    if value < timedelta(0):
        raise ValueError("duration must not be negative")
    if value > MAX_DURATION:
        raise ValueError("duration must not exceed 100 years")
    return value


# ── Transport / content security ─────────────────────────────────────────────

class HstsOptions(_Options):
    max_age: timedelta = timedelta(days=365)
    include_subdomains: bool = True
    preload: bool = False
    excluded_hosts: frozenset[str] = frozenset()

    @field_validator("max_age")
    @classmethod
    def _check_max_age(cls, value: timedelta) -> timedelta:
        return _bounded_duration(value)

    @field_validator("excluded_hosts")
    @classmethod
    def _lower_hosts(cls, hosts: frozenset[str]) -> frozenset[str]:
        return frozenset(h.lower() for h in hosts)


class CspOptions(_Options):
    """
    Content-Security-Policy template.

    `policy` may contain NONCE_PLACEHOLDER any number of times. When `nonce`
    is None a fresh value is generated for every request.
    """
    policy: str = f"default-src 'self'; script-src 'self' 'nonce-{NONCE_PLACEHOLDER}'; object-src 'none'; base-uri 'self'"
    nonce: str | None = None
    is_spa_app: bool = False
    spa_directives: str = ""
    report_only: bool = False


class CspMetaOptions(_Options):
    policy: str = f"default-src 'self'; script-src 'self' 'nonce-{NONCE_PLACEHOLDER}'"
    nonce: str | None = None


class XHeadersOptions(_Options):
    add_x_frame_options: bool = True


# ── Caching ──────────────────────────────────────────────────────────────────

class CacheControlOptions(_Options):
    cache_max_age: timedelta = timedelta(minutes=60)
    cache_max_age_static_files: timedelta = timedelta(days=365)
    cache_http_get_methods: bool = False
    static_file_extensions: frozenset[str] = DEFAULT_STATIC_FILE_EXTENSIONS
    # None leaves responses that are neither static nor cacheable GETs alone
    fallback: str | None = "no-store"

    @field_validator("cache_max_age", "cache_max_age_static_files")
    @classmethod
    def _check_durations(cls, value: timedelta) -> timedelta:
        return _bounded_duration(value)

    @field_validator("static_file_extensions")
    @classmethod
    def _normalize_extensions(cls, exts: frozenset[str]) -> frozenset[str]:
        return frozenset(e.lower() if e.startswith(".") else f".{e.lower()}" for e in exts)


class StaticFilesCacheOptions(_Options):
    max_age: timedelta = timedelta(days=100)

    @field_validator("max_age")
    @classmethod
    def _check_max_age(cls, value: timedelta) -> timedelta:
        return _bounded_duration(value)


# ── Diagnostics ──────────────────────────────────────────────────────────────

class EndpointListOptions(_Options):
    path: str = Field("/_endpoints", min_length=1, pattern=r"^/")
