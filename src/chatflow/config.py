"""
Configuration management using Pydantic Settings.

This module handles all environment-based configuration for the chatflow service,
including API settings, the Open WebUI backend connection, tool endpoints and
polling behaviour.
"""

from typing import TYPE_CHECKING

from pydantic import AliasChoices, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

if TYPE_CHECKING:
    from chatflow.models.chains import WorkflowConfig


class Settings(BaseSettings):
    """
    Application settings loaded from environment variables and .env file.

    The Open WebUI and tool endpoint settings also accept the legacy variable
    names (OPENWEBUIHOSTURL, OPENWEBUIAPITOKEN, ...) used by older deployments.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # API Configuration
    api_host: str = Field(default="0.0.0.0", description="API server host address")
    api_port: int = Field(default=8080, description="API server port")
    api_title: str = Field(default="chatflow", description="API title")
    api_version: str = Field(default="0.1.0", description="API version")

    # Environment
    environment: str = Field(
        default="development",
        description="Deployment environment",
        pattern="^(development|staging|production|test)$",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Logging level",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
    )
    log_format: str = Field(
        default="json",
        description="Logging format",
        pattern="^(json|standard)$",
    )

    # Open WebUI backend
    webui_host_url: str = Field(
        default="http://localhost:3000",
        validation_alias=AliasChoices("webui_host_url", "openwebuihosturl"),
        description="Base URL of the Open WebUI chat backend",
    )
    webui_api_token: str = Field(
        validation_alias=AliasChoices("webui_api_token", "openwebuiapitoken"),
        description="Bearer token sent on every Open WebUI call",
        min_length=1,
    )
    webui_model_name: str = Field(
        default="llama3.2:latest",
        validation_alias=AliasChoices("webui_model_name", "openwebuimodelname"),
        description="Model used for chat creation and completion",
    )
    webui_timeout: float = Field(
        default=60.0,
        description="Per-request timeout in seconds for Open WebUI calls",
        gt=0,
        le=300,
    )
    chat_tools: list[str] = Field(
        default=["DVSA Lookup"],
        description="Tool names enabled on newly created chats",
    )
    temp_dir_path: str = Field(
        default="/tmp/chatflow",
        description="Directory used to stage documents before upload",
    )

    # Completion polling
    poll_interval: float = Field(
        default=1.0,
        description="Seconds between chat state fetches while waiting for completion",
        ge=0.0,
        le=60.0,
    )
    max_poll_attempts: int = Field(
        default=15,
        description="Maximum number of chat state fetches before giving up",
        ge=1,
        le=600,
    )

    # Completion variables
    user_language: str = Field(default="en-US", description="{{USER_LANGUAGE}} variable")
    user_timezone: str = Field(default="Europe", description="{{CURRENT_TIMEZONE}} variable")

    # Tool endpoints
    registry_api_url: str = Field(
        default="http://127.0.0.1/",
        validation_alias=AliasChoices("registry_api_url", "dvsaapiurl"),
        description="Vehicle registry base URL (must use a literal IP address)",
    )
    alpr_api_url: str = Field(
        default="http://127.0.0.1:8000",
        validation_alias=AliasChoices("alpr_api_url", "openalprapiurl"),
        description="Licence plate recognition service base URL",
    )
    tool_timeout: float = Field(
        default=30.0,
        description="Per-request timeout in seconds for tool calls",
        gt=0,
        le=300,
    )
    egress_connect_timeout: float = Field(
        default=5.0,
        description="Connect timeout in seconds for registry connections",
        gt=0,
        le=60,
    )
    egress_keepalive: float = Field(
        default=5.0,
        description="Keep-alive expiry in seconds for registry connections",
        gt=0,
        le=300,
    )

    # CORS Configuration
    cors_origins: list[str] = Field(
        default=["*"],
        description="Allowed CORS origins",
    )
    cors_allow_credentials: bool = Field(
        default=False,  # Must be False when using wildcard
        description="Allow CORS credentials",
    )
    cors_allow_methods: list[str] = Field(
        default=["GET", "POST", "OPTIONS"],
        description="Allowed CORS methods",
    )
    cors_allow_headers: list[str] = Field(
        default=["Content-Type", "Authorization"],
        description="Allowed CORS headers",
    )

    # Request Validation
    max_request_body_size: int = Field(
        default=10485760,  # 10 MB, matches the upload limit
        description="Maximum request body size in bytes",
        ge=1024,
        le=52428800,
    )

    # JWT Authentication Configuration
    jwt_secret_key: str = Field(
        description="Secret key for JWT token signing and verification (minimum 32 characters)",
        min_length=32,
    )
    jwt_algorithm: str = Field(
        default="HS256",
        description="Algorithm used for JWT signing (HS256 recommended)",
    )

    # Security Headers Configuration
    enable_security_headers: bool = Field(
        default=True,
        description="Enable security headers (X-Content-Type-Options, X-Frame-Options, HSTS, X-XSS-Protection)",
    )

    # Rate Limiting Configuration
    rate_limit_enabled: bool = Field(
        default=True,
        description="Enable rate limiting for API endpoints",
    )
    rate_limit_default: str = Field(
        default="100/hour",
        description="Default rate limit applied globally (format: count/time_unit)",
    )
    rate_limit_chat: str = Field(
        default="10/minute",
        description="Rate limit for chat creation and result endpoints",
    )
    rate_limit_tools: str = Field(
        default="30/minute",
        description="Rate limit for tool and file endpoints",
    )

    @property
    def workflow_config(self) -> "WorkflowConfig":
        """
        Build the WorkflowConfig consumed by the chat workflow and poller.

        Returns:
            WorkflowConfig instance ready for use with ChatWorkflow
        """
        # Lazy import to avoid circular dependencies
        from chatflow.models.chains import WorkflowConfig

        return WorkflowConfig(
            model_name=self.webui_model_name,
            tools=list(self.chat_tools),
            user_language=self.user_language,
            user_timezone=self.user_timezone,
            poll_interval=self.poll_interval,
            max_poll_attempts=self.max_poll_attempts,
        )
