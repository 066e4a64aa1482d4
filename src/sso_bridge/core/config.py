from functools import lru_cache

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

MIN_SSO_CODE_TTL_SECONDS = 60
MAX_SSO_CODE_TTL_SECONDS = 120


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # App
    app_name: str = "Tenant SSO Bridge"
    app_env: str = "development"  # development, testing, production
    debug: bool = False
    enable_openapi: bool = True

    # Security
    log_user_emails: bool = False  # Keep False in production for GDPR compliance
    csp_production: str = "default-src 'self'; frame-ancestors 'none'"

    # Database
    database_url: str
    database_migrations_url: str | None = None
    database_pool_size: int = 5
    database_max_overflow: int = 10
    database_ssl_mode: str = "prefer"  # disable, prefer, require, verify-ca, verify-full
    database_statement_cache_size: int = 100

    # Redis (sessions fall back to in-process storage without it)
    redis_url: str | None = None
    redis_pool_size: int = 10

    # Identity provider (OIDC, Keycloak-style realm layout)
    idp_base_url: str
    idp_realm: str
    idp_client_id: str
    idp_client_secret: str
    idp_scopes: str = "openid profile email"
    idp_timeout_seconds: float = 5.0
    idp_id_token_leeway_seconds: int = 30

    # Domains
    central_domains: list[str] = ["localhost"]
    public_url_scheme: str = "https"
    public_url_port: int | None = None

    # SSO routes
    sso_redirect_path: str = "/auth/sso/redirect"
    sso_callback_path: str = "/auth/sso/callback"
    sso_redemption_path: str = "/sso/start"
    login_path: str = "/login"
    logout_path: str = "/logout"
    logged_out_path: str = "/logged-out"
    sso_default_landing_path: str = "/dashboard"

    # SSO state and handoff
    sso_state_secret: str
    sso_state_max_age_seconds: int = 600
    sso_state_signing_required: bool = True
    sso_code_ttl_seconds: int = 90
    # Spent and expired codes are kept this long so replays are still classified
    sso_code_retention_hours: int = 24

    # Tenant sessions
    session_cookie_name: str = "tenant_session"
    session_cookie_secure: bool = True
    session_ttl_minutes: int = 120
    session_validity_check_interval_seconds: int = 0  # 0 = check on every full-page request
    csrf_cookie_name: str = "XSRF-TOKEN"
    csrf_header_name: str = "X-CSRF-Token"

    # Metrics
    metrics_api_key: str | None = None  # If set, /metrics requires this key

    # Rate limits (slowapi syntax)
    sso_rate_limit: str = "30/minute"

    @field_validator("sso_state_secret")
    @classmethod
    def validate_state_secret(cls, v: str) -> str:
        if v == "change-this-to-a-secure-random-string":
            raise ValueError(
                "SSO_STATE_SECRET must be changed from default value. "
                "Generate a secure secret with: openssl rand -hex 32"
            )
        if len(v) < 32:
            raise ValueError("SSO_STATE_SECRET must be at least 32 characters")
        return v

    @field_validator("sso_code_ttl_seconds")
    @classmethod
    def validate_code_ttl(cls, v: int) -> int:
        """Handoff codes must stay short-lived."""
        if not MIN_SSO_CODE_TTL_SECONDS <= v <= MAX_SSO_CODE_TTL_SECONDS:
            raise ValueError(
                f"SSO_CODE_TTL_SECONDS must be between {MIN_SSO_CODE_TTL_SECONDS} "
                f"and {MAX_SSO_CODE_TTL_SECONDS} seconds"
            )
        return v

    @field_validator("central_domains")
    @classmethod
    def validate_central_domains(cls, v: list[str]) -> list[str]:
        """The callback URL is built from the first central domain, so one is required."""
        if not v:
            raise ValueError("CENTRAL_DOMAINS must contain at least one domain")
        for domain in v:
            if "*" in domain or "/" in domain:
                raise ValueError(f"Invalid central domain '{domain}': use a bare host name")
        return [domain.lower() for domain in v]

    @field_validator("sso_default_landing_path")
    @classmethod
    def validate_landing_path(cls, v: str) -> str:
        if not v.startswith("/") or v.startswith("//"):
            raise ValueError("SSO_DEFAULT_LANDING_PATH must be a local absolute path")
        return v

    @property
    def idp_realm_url(self) -> str:
        return f"{self.idp_base_url.rstrip('/')}/realms/{self.idp_realm}"


@lru_cache
def get_settings() -> Settings:
    return Settings()
