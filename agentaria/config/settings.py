from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from container + optionally from files
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.docker"),
        extra="ignore",
        case_sensitive=False,
    )

    # App
    APP_NAME: str = Field(default="agentaria", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))
    DEBUG: bool = Field(default=False, validation_alias=AliasChoices("DEBUG", "debug"))

    # Infrastructure
    DATABASE_URL: str = Field(
        default="postgresql+asyncpg://postgres:postgres@db:5432/agentaria_db",
        validation_alias=AliasChoices("DATABASE_URL", "database_url"),
    )
    DATABASE_SSL: bool = Field(default=False, validation_alias=AliasChoices("DATABASE_SSL", "database_ssl"))

    # Identity (Bearer JWT issued by the auth provider)
    AUTH_JWT_SECRET: str = Field(default="", validation_alias=AliasChoices("AUTH_JWT_SECRET", "auth_jwt_secret"))
    AUTH_JWT_ALGORITHM: str = Field(default="HS256", validation_alias=AliasChoices("AUTH_JWT_ALGORITHM", "auth_jwt_algorithm"))
    AUTH_JWT_AUDIENCE: str = Field(default="authenticated", validation_alias=AliasChoices("AUTH_JWT_AUDIENCE", "auth_jwt_audience"))

    # Navigation targets handed back to the web client
    LOGIN_PATH: str = Field(default="/login", validation_alias=AliasChoices("LOGIN_PATH", "login_path"))
    DASHBOARD_PATH: str = Field(default="/dashboard", validation_alias=AliasChoices("DASHBOARD_PATH", "dashboard_path"))

    # Automation webhook (receives the consolidated onboarding record)
    ONBOARDING_WEBHOOK_URL: str = Field(
        default="https://n8n.srv1192286.hstgr.cloud/webhook/onboarding",
        validation_alias=AliasChoices("ONBOARDING_WEBHOOK_URL", "onboarding_webhook_url"),
    )
    ONBOARDING_WEBHOOK_TIMEOUT_SECONDS: float = Field(
        default=30.0,
        validation_alias=AliasChoices("ONBOARDING_WEBHOOK_TIMEOUT_SECONDS", "onboarding_webhook_timeout_seconds"),
    )

    # Chat pacing (milliseconds); TYPING_DELAY_SCALE=0 disables every delay
    TYPING_DELAY_SCALE: float = Field(default=1.0, validation_alias=AliasChoices("TYPING_DELAY_SCALE", "typing_delay_scale"))
    ONBOARDING_START_DELAY_MS: int = Field(default=600, validation_alias=AliasChoices("ONBOARDING_START_DELAY_MS", "onboarding_start_delay_ms"))
    ONBOARDING_MESSAGE_SETTLE_MS: int = Field(default=280, validation_alias=AliasChoices("ONBOARDING_MESSAGE_SETTLE_MS", "onboarding_message_settle_ms"))
    ONBOARDING_STEP_TRANSITION_MS: int = Field(default=400, validation_alias=AliasChoices("ONBOARDING_STEP_TRANSITION_MS", "onboarding_step_transition_ms"))
    ONBOARDING_DONE_DISPLAY_MS: int = Field(default=3500, validation_alias=AliasChoices("ONBOARDING_DONE_DISPLAY_MS", "onboarding_done_display_ms"))

    # Policy toggles (both off keeps the permissive behaviour)
    ONBOARDING_REQUIRE_DELIVERY: bool = Field(
        default=False,
        validation_alias=AliasChoices("ONBOARDING_REQUIRE_DELIVERY", "onboarding_require_delivery"),
    )
    ONBOARDING_ENFORCE_HOURS_ORDER: bool = Field(
        default=False,
        validation_alias=AliasChoices("ONBOARDING_ENFORCE_HOURS_ORDER", "onboarding_enforce_hours_order"),
    )

    # Uploads
    MAX_DOCUMENT_BYTES: int = Field(default=25 * 1024 * 1024, validation_alias=AliasChoices("MAX_DOCUMENT_BYTES", "max_document_bytes"))


settings = Settings()
