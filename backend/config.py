"""Application configuration using pydantic-settings."""

from typing import Any

from pydantic import field_validator
from pydantic.fields import FieldInfo
from pydantic_settings import BaseSettings, PydanticBaseSettingsSource, SettingsConfigDict

from services.credential_manager import CREDENTIAL_KEYS, get_credential

# Fields the application cannot start without.
REQUIRED_FIELDS: tuple[str, ...] = (
    "APPWRITE_ENDPOINT",
    "APPWRITE_PROJECT_ID",
    "APPWRITE_API_KEY",
    "APPWRITE_DATABASE_ID",
    "APPWRITE_USER_COLLECTION_ID",
    "APPWRITE_BANK_COLLECTION_ID",
    "PLAID_CLIENT_ID",
    "PLAID_SECRET",
    "DWOLLA_KEY",
    "DWOLLA_SECRET",
)

ACCOUNT_SELECTION_POLICIES = frozenset({"first", "reject_if_multiple", "explicit"})


class KeychainSettingsSource(PydanticBaseSettingsSource):
    """Load credential fields from the OS keychain via ``keyring``.

    Only fields whose uppercase name appears in
    :data:`~services.credential_manager.CREDENTIAL_KEYS` are looked up.
    All other fields return ``None`` so the next source in the chain
    handles them.
    """

    def get_field_value(
        self, field: FieldInfo, field_name: str
    ) -> tuple[Any, str, bool]:
        env_name = field_name.upper()
        if env_name not in CREDENTIAL_KEYS:
            return None, field_name, False
        value = get_credential(env_name)
        return value, field_name, False

    def __call__(self) -> dict[str, Any]:
        d: dict[str, Any] = {}
        for field_name, field_info in self.settings_cls.model_fields.items():
            value, key, is_complex = self.get_field_value(field_info, field_name)
            if value is not None:
                d[key] = value
        return d


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return (
            init_settings,
            KeychainSettingsSource(settings_cls),
            env_settings,
            dotenv_settings,
            file_secret_settings,
        )

    # Appwrite (identity + document database)
    APPWRITE_ENDPOINT: str = "https://cloud.appwrite.io/v1"
    APPWRITE_PROJECT_ID: str = ""
    APPWRITE_API_KEY: str = ""
    APPWRITE_DATABASE_ID: str = ""
    APPWRITE_USER_COLLECTION_ID: str = ""
    APPWRITE_BANK_COLLECTION_ID: str = ""

    # Plaid (bank data aggregation)
    PLAID_CLIENT_ID: str = ""
    PLAID_SECRET: str = ""
    PLAID_ENVIRONMENT: str = "sandbox"
    PLAID_PRODUCTS: str = "auth"
    PLAID_COUNTRY_CODES: str = "US"
    PLAID_LANGUAGE: str = "en"

    # Dwolla (payment rail)
    DWOLLA_KEY: str = ""
    DWOLLA_SECRET: str = ""
    DWOLLA_ENVIRONMENT: str = "sandbox"

    # Bank linking
    ACCOUNT_SELECTION_POLICY: str = "first"

    # Session cookie
    SESSION_COOKIE_NAME: str = "appwrite-session"

    # App settings
    FRONTEND_URL: str = "http://localhost:3000"
    ENVIRONMENT: str = "development"
    DEBUG: bool = True
    LOG_LEVEL: str = "INFO"

    @field_validator("LOG_LEVEL", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize LOG_LEVEL to an uppercase Python logging level."""
        valid = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid:
            raise ValueError(f"LOG_LEVEL must be one of {valid}, got {v!r}")
        return v.upper()

    @field_validator("ACCOUNT_SELECTION_POLICY", mode="before")
    @classmethod
    def validate_selection_policy(cls, v: str) -> str:
        """Normalize ACCOUNT_SELECTION_POLICY (``reject-if-multiple`` is accepted too)."""
        normalized = v.strip().lower().replace("-", "_")
        if normalized not in ACCOUNT_SELECTION_POLICIES:
            raise ValueError(
                "ACCOUNT_SELECTION_POLICY must be one of "
                f"{sorted(ACCOUNT_SELECTION_POLICIES)}, got {v!r}"
            )
        return normalized

    @staticmethod
    def _split(value: str) -> list[str]:
        return [part.strip() for part in value.split(",") if part.strip()]

    @property
    def plaid_products_list(self) -> list[str]:
        """Plaid Link products as a list."""
        return self._split(self.PLAID_PRODUCTS)

    @property
    def plaid_country_codes_list(self) -> list[str]:
        """Plaid Link country codes as a list."""
        return self._split(self.PLAID_COUNTRY_CODES)

    def missing_required(self) -> list[str]:
        """Return the names of required settings that are empty."""
        return [name for name in REQUIRED_FIELDS if not getattr(self, name)]

    def validate_required(self) -> None:
        """Raise ``RuntimeError`` if any required setting is missing.

        Called once at application startup so that a misconfigured
        deployment fails before serving requests.
        """
        missing = self.missing_required()
        if missing:
            raise RuntimeError(
                "Missing required configuration: " + ", ".join(missing)
            )


settings = Settings()
