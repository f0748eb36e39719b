from headerpolicy.options import (
    CacheControlOptions,
    CspMetaOptions,
    CspOptions,
    EndpointListOptions,
    HstsOptions,
    StaticFilesCacheOptions,
    XHeadersOptions,
)
from headerpolicy.pipeline import HeaderPipeline
from headerpolicy.middleware.csp import generate_nonce
from headerpolicy.middleware.request_context import get_csp_nonce, get_request_id
from headerpolicy.middleware.static_files import CachedStaticFiles, mount_static_files

__all__ = [
    "HeaderPipeline",
    "HstsOptions", "CspOptions", "CspMetaOptions", "CacheControlOptions",
    "StaticFilesCacheOptions", "XHeadersOptions", "EndpointListOptions",
    "CachedStaticFiles", "mount_static_files",
    "generate_nonce", "get_csp_nonce", "get_request_id",
]
