from datetime import timedelta

from pydantic import model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from headerpolicy.options import (
    CacheControlOptions,
    CspMetaOptions,
    CspOptions,
    EndpointListOptions,
    HstsOptions,
    StaticFilesCacheOptions,
    XHeadersOptions,
)


class Settings(BaseSettings):
    # App
    environment: str = "development"
    log_level: str = "INFO"
    json_logs: bool = False
    expose_metrics: bool = False

    # HSTS
    hsts_enabled: bool = True
    hsts_max_age: timedelta = timedelta(days=365)
    hsts_include_subdomains: bool = True
    hsts_preload: bool = False

    # CSP
    csp_enabled: bool = True
    csp_policy: str = CspOptions().policy
    csp_is_spa_app: bool = False
    csp_spa_directives: str = ""
    csp_report_only: bool = False
    csp_meta_enabled: bool = False

    # Caching
    cache_max_age: timedelta = timedelta(minutes=60)
    cache_max_age_static_files: timedelta = timedelta(days=365)
    cache_http_get_methods: bool = False
    static_dir: str = ""
    static_path: str = "/static"
    static_max_age: timedelta = timedelta(days=100)

    # Misc headers
    x_frame_options: bool = True
    list_endpoints: bool = False
    endpoints_path: str = "/_endpoints"

    model_config = SettingsConfigDict(env_prefix="HEADERS_", env_file=".env", extra="ignore")

    @model_validator(mode="after")
    def _validate_production(self):
        if self.environment == "production":
            if self.list_endpoints:
                raise ValueError(
                    "Production must not expose the endpoint listing"
                )
        return self

    def hsts_options(self) -> HstsOptions:
        return HstsOptions(
            max_age=self.hsts_max_age,
            include_subdomains=self.hsts_include_subdomains,
            preload=self.hsts_preload,
        )

    def csp_options(self) -> CspOptions:
        return CspOptions(
            policy=self.csp_policy,
            is_spa_app=self.csp_is_spa_app,
            spa_directives=self.csp_spa_directives,
            report_only=self.csp_report_only,
        )

    def csp_meta_options(self) -> CspMetaOptions:
        return CspMetaOptions(policy=self.csp_policy)

    def cache_control_options(self) -> CacheControlOptions:
        return CacheControlOptions(
            cache_max_age=self.cache_max_age,
            cache_max_age_static_files=self.cache_max_age_static_files,
            cache_http_get_methods=self.cache_http_get_methods,
        )

    def static_files_options(self) -> StaticFilesCacheOptions:
        return StaticFilesCacheOptions(max_age=self.static_max_age)

    def x_headers_options(self) -> XHeadersOptions:
        return XHeadersOptions(add_x_frame_options=self.x_frame_options)

    def endpoint_list_options(self) -> EndpointListOptions:
        return EndpointListOptions(path=self.endpoints_path)


settings = Settings()
