import logging
import os
import sys
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, model_validator
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource
from typing_extensions import Self

# =============================================================================
# Application Configuration
# =============================================================================


class YamlConfigSettingsSource(PydanticBaseSettingsSource):
    """Load settings from YAML file specified by TENANTAUTH_CONFIG_FILE env var."""

    def get_field_value(self, field: Any, field_name: str) -> tuple[Any, str, bool]:
        yaml_data = self._load_yaml_config()
        field_value = yaml_data.get(field_name)
        return field_value, field_name, False

    def __call__(self) -> dict[str, Any]:
        return self._load_yaml_config()

    def _load_yaml_config(self) -> dict[str, Any]:
        config_file = os.environ.get("TENANTAUTH_CONFIG_FILE")
        if config_file:
            path = Path(config_file)
            if path.exists():
                return yaml.safe_load(path.read_text()) or {}
        return {}


class Server(BaseModel):
    """Server configuration (nested in Config, uses env_nested_delimiter)."""

    name: str = "tenantauth"
    version: str = "0.1.0"
    description: str = "Roles, invitations and authorization for a multi-tenant dashboard"


class DatabaseConfig(BaseModel):
    url: str = "sqlite+aiosqlite:///./tenantauth.db"
    echo: bool = False
    auto_migrate: bool = True  # Run alembic upgrade on startup


class LoggingConfig(BaseModel):
    """Logging configuration (nested in Config, uses env_nested_delimiter)."""

    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-8s [%(name)s] %(message)s"
    date_format: str = "%Y-%m-%d %H:%M:%S"
    authz_level: str | None = None  # Gate decisions log at DEBUG on "tenantauth.authz"

    @property
    def file(self) -> str | None:
        """Get log file path from TENANTAUTH_LOG_FILE env var."""
        return os.environ.get("TENANTAUTH_LOG_FILE")


# =============================================================================
# Authentication Configuration
# =============================================================================


class JwtConfig(BaseModel):
    """JWT configuration."""

    secret: str = ""  # Must be set in production
    algorithm: str = "HS256"
    audience: str = "dashboard"
    session_expire_minutes: int = 60 * 8
    single_purpose_expire_minutes: int = 15


class AuthConfig(BaseModel):
    jwt: JwtConfig = JwtConfig()


class InvitationConfig(BaseModel):
    # reject: a second invite to the same lineage fails while the first is pending
    # refresh: it replaces the pending invitation's role and inviter
    reinvite_policy: Literal["reject", "refresh"] = "reject"


class Config(BaseSettings):
    server: Server = Server()
    database: DatabaseConfig = DatabaseConfig()
    logging: LoggingConfig = LoggingConfig()
    auth: AuthConfig = AuthConfig()
    invitations: InvitationConfig = InvitationConfig()

    model_config = {
        "env_prefix": "TENANTAUTH_",
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_nested_delimiter": "__",  # Allows TENANTAUTH_DATABASE__URL override
    }

    @model_validator(mode="after")
    def check_jwt_algorithm(self) -> Self:
        if not self.auth.jwt.algorithm.startswith("HS"):
            raise ValueError("Only HMAC (HS*) JWT algorithms are supported")
        return self

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Customize settings sources to include YAML config.

        Priority (highest to lowest):
        1. init_settings - values passed to Config()
        2. env_settings - environment variables
        3. dotenv_settings - .env file
        4. yaml_settings - TENANTAUTH_CONFIG_FILE yaml
        5. file_secret_settings - secrets from files
        """
        return (
            init_settings,
            env_settings,
            dotenv_settings,
            YamlConfigSettingsSource(settings_cls),
            file_secret_settings,
        )


def configure_logging(config: LoggingConfig) -> None:
    """Configure Python logging based on config.

    Should be called early in application startup so every module logger
    picks up the configuration.
    """
    root_logger = logging.getLogger()
    root_logger.setLevel(config.level)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    formatter = logging.Formatter(config.format, datefmt=config.date_format)

    if config.file:
        log_path = Path(config.file).expanduser()
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path)
        file_handler.setLevel(config.level)
        file_handler.setFormatter(formatter)
        root_logger.addHandler(file_handler)
    else:
        console_handler = logging.StreamHandler(sys.stderr)
        console_handler.setLevel(config.level)
        console_handler.setFormatter(formatter)
        root_logger.addHandler(console_handler)

    # Reduce noise from third-party libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("asyncio").setLevel(logging.WARNING)
    logging.getLogger("aiosqlite").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)
    logging.getLogger("alembic").setLevel(logging.INFO)

    if config.authz_level:
        logging.getLogger("tenantauth.authz").setLevel(config.authz_level)

    logging.debug("Logging configured: level=%s, file=%s", config.level, config.file)
