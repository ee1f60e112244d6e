"""Application configuration (settings and environment).

Single source of truth for all configuration. Uses pydantic-settings
with .env support. Required fields (SUPABASE_URL, SUPABASE_SERVICE_KEY)
are validated at load time.
"""

from functools import lru_cache

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment and .env.

    All settings are optional with defaults except those validated in
    validate_required (supabase_url, supabase_service_key).
    """

    # App
    app_name: str = "gdc-properties"
    app_version: str = "1.0.0"
    debug: bool = False

    # Managed backend (data API, auth, storage share the same project URL)
    supabase_url: str = ""
    supabase_service_key: SecretStr = SecretStr("")
    supabase_anon_key: SecretStr | None = None
    http_timeout_seconds: float = 15.0

    # Query cache
    cache_ttl_seconds: float = 600.0  # 10 minutes

    # Loading indicator timings
    loading_show_delay_ms: int = 300
    loading_hide_delay_ms: int = 200
    loading_quick_load_ms: int = 500
    loading_max_visible_ms: int = 10_000

    # CORS
    allowed_origins: str = "http://localhost:3000"

    # Storage
    property_images_bucket: str = "property-images"
    profile_images_bucket: str = "profile-images"
    signed_url_expiry_seconds: int = 3600
    max_upload_size: int = 10 * 1024 * 1024  # 10MB

    # Geocoding
    geocoding_url: str = "https://nominatim.openstreetmap.org/search"
    geocoding_user_agent: str = "GDC-Properties/1.0"
    geocoding_country: str = "New Zealand"
    geocoding_country_codes: str = "nz"
    geocoding_interval_seconds: float = 1.0  # public endpoint allows ~1 request per second

    # Email (SMTP relay); when smtp_host is empty emails are logged only
    smtp_host: str = ""
    smtp_port: int = 587
    smtp_username: str = ""
    smtp_password: SecretStr | None = None
    smtp_use_tls: bool = True
    email_from: str = "no-reply@gdcproperties.example"
    admin_email: str = ""
    public_app_url: str = "http://localhost:3000"

    # Payments (Stripe Connect)
    stripe_secret_key: SecretStr | None = None
    stripe_api_base: str = "https://api.stripe.com/v1"
    stripe_connect_country: str = "US"
    stripe_refresh_path: str = "/dashboard?tab=banking&refresh=true"
    stripe_return_path: str = "/dashboard?tab=banking&success=true"
    stripe_webhook_secret: SecretStr | None = None

    # Rent payments
    payment_currency: str = "usd"
    platform_fee_percentage: float = 5.0  # when the property does not set one
    payment_admin_fee: float = 100.0
    email_verification_ttl_seconds: int = 900  # 15 minutes

    # Request / middleware
    request_timeout_seconds: int = 60
    request_id_header: str = "X-Request-ID"
    correlation_id_header: str = "X-Correlation-ID"

    # Telemetry (OpenTelemetry tracing)
    telemetry_enabled: bool = False
    telemetry_exporter: str = "console"  # console | otlp | none
    telemetry_otlp_endpoint: str | None = None
    telemetry_sample_rate: float = 1.0
    telemetry_environment: str = "development"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    @model_validator(mode="after")
    def validate_required(self) -> "Settings":
        """Validate the managed backend connection settings."""
        if not self.supabase_url:
            raise ValueError(
                "SUPABASE_URL is required. Set in environment or .env file."
            )
        if not self.supabase_url.startswith(("http://", "https://")):
            raise ValueError(
                f"SUPABASE_URL must be an http(s) URL, got: {self.supabase_url!r}"
            )
        if not self.supabase_service_key.get_secret_value():
            raise ValueError(
                "SUPABASE_SERVICE_KEY is required. Copy it from the project API settings."
            )
        if not 0 < self.loading_show_delay_ms <= self.loading_max_visible_ms:
            raise ValueError(
                "loading_show_delay_ms must be positive and not exceed loading_max_visible_ms"
            )
        if not 0.0 <= self.platform_fee_percentage <= 100.0:
            raise ValueError("platform_fee_percentage must be between 0 and 100")
        if not 0.0 <= self.telemetry_sample_rate <= 1.0:
            raise ValueError("telemetry_sample_rate must be between 0.0 and 1.0")
        if self.telemetry_exporter not in ("console", "otlp", "none"):
            raise ValueError(
                f"TELEMETRY_EXPORTER must be console, otlp or none, got: {self.telemetry_exporter!r}"
            )
        return self

    @property
    def cors_origins(self) -> list[str]:
        return [o.strip() for o in self.allowed_origins.split(",") if o.strip()]

    @property
    def rest_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/rest/v1"

    @property
    def auth_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/auth/v1"

    @property
    def storage_url(self) -> str:
        return f"{self.supabase_url.rstrip('/')}/storage/v1"

    @property
    def stripe_refresh_url(self) -> str:
        return f"{self.public_app_url.rstrip('/')}{self.stripe_refresh_path}"

    @property
    def stripe_return_url(self) -> str:
        return f"{self.public_app_url.rstrip('/')}{self.stripe_return_path}"


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings (single instance per process).

    Validation runs on first call, not at import time. In tests, call
    get_settings.cache_clear() before overriding env vars so the next
    get_settings() uses the new values.

    Returns:
        Loaded and validated Settings instance.
    """
    return Settings()
