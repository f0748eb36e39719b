"""
Static file serving with long-lived, immutable cache headers.

Asset filenames are expected to be fingerprinted (app.3f9a2c.js), so a
served file never changes under the same URL and browsers may keep it for
the whole max-age without revalidating.
"""

import os
from os import PathLike

from starlette.applications import Starlette
from starlette.responses import Response
from starlette.staticfiles import StaticFiles
from starlette.types import Scope

from headerpolicy.headers import CACHE_CONTROL, EXPIRES, expires_after, max_age_seconds, remove_header
from headerpolicy.middleware.metrics import header_policy_applied_total
from headerpolicy.options import StaticFilesCacheOptions


class CachedStaticFiles(StaticFiles):
    def __init__(self, *args, options: StaticFilesCacheOptions | None = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.options = options or StaticFilesCacheOptions()
        self.max_age = max_age_seconds(self.options.max_age)
        self.cache_control = f"public, max-age={self.max_age}, immutable"

    def file_response(
        self,
        full_path: PathLike | str,
        stat_result: os.stat_result,
        scope: Scope,
        status_code: int = 200,
    ) -> Response:
        response = super().file_response(full_path, stat_result, scope, status_code)
        if response.status_code in (200, 304):
            self.prepare_response(response)
        return response

    def prepare_response(self, response: Response) -> None:
        # Remove first, then append, so exactly one value of each survives
        remove_header(response.headers, CACHE_CONTROL)
        remove_header(response.headers, EXPIRES)
        response.headers.append(CACHE_CONTROL, self.cache_control)
        response.headers.append(EXPIRES, expires_after(self.max_age))
        header_policy_applied_total.labels(policy="static_files").inc()


def mount_static_files(
    app: Starlette,
    path: str,
    directory: str | PathLike,
    options: StaticFilesCacheOptions | None = None,
    name: str = "static",
) -> CachedStaticFiles:
    """Serve `directory` under `path` with immutable cache headers."""
    static = CachedStaticFiles(directory=directory, options=options)
    app.mount(path, static, name=name)
    return static
