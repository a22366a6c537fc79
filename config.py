from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class LoginConfig(BaseSettings):
    """Credentials for the employee login and the products-entry login dialog."""

    username: str = Field("", validation_alias="POS_USERNAME")
    password: str = Field("", validation_alias="POS_PASSWORD")


class SiteConfig(BaseSettings):
    """Location of the back-office application."""

    model_config = SettingsConfigDict(env_prefix="SITE__")

    domain: str = ""  # asked interactively when empty
    scheme: str = "https"
    login_path: str = "/auth/employees/login"
    dashboard_fragment: str = "/dashboard"

    def build_url(self, path: str, domain: Optional[str] = None) -> str:
        host = (domain or self.domain).strip().removeprefix("https://").removeprefix("http://")
        return f"{self.scheme}://{host.rstrip('/')}{path}"


class RecordSourceConfig(BaseSettings):
    """Where the batch of materials comes from."""

    excel_path: Path = Field(Path("./materials_template.xlsx"), validation_alias="MATERIALS_EXCEL_PATH")


class LoggingConfig(BaseSettings):
    """Configuration for logging."""

    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR
    log_file_path: Optional[Path] = Path("./logs/materials_entry.log")
    metrics_file_path: Path = Path("./logs/metrics.json")


class ResilienceConfig(BaseSettings):
    """Retry policy for page navigation during session bootstrap."""

    navigation_max_attempts: int = 3
    initial_wait: float = 1.0  # seconds
    max_wait: float = 10.0  # seconds
    exponential_base: int = 2


class PerformanceConfig(BaseSettings):
    """Timeouts and polling cadence, all in milliseconds."""

    poll_interval_ms: int = 100
    selector_timeout: int = 10000
    navigation_timeout: int = 30000
    dashboard_redirect_timeout: int = 10000
    entry_open_timeout: int = 8000
    form_units_timeout: int = 8000
    unit_select_timeout: int = 15000
    unit_confirm_timeout: int = 6000
    toggle_timeout: int = 5000
    modal_close_timeout: int = 8000

    @field_validator("poll_interval_ms")
    @classmethod
    def poll_interval_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("poll_interval_ms must be positive")
        return v


class GeneralSettingsConfig(BaseSettings):
    """Other general settings for the bot."""

    browser: str = "firefox"  # firefox, chromium, webkit
    browser_headless: bool = False
    keep_browser_open_ms: int = 2000
    abandon_policy: str = "dismiss"  # dismiss, leave
    toggles: List[str] = ["taxable", "Prices including VAT"]

    @field_validator("browser")
    @classmethod
    def browser_supported(cls, v: str) -> str:
        if v not in ("firefox", "chromium", "webkit"):
            raise ValueError(f"Unsupported browser: {v}")
        return v

    @field_validator("abandon_policy")
    @classmethod
    def abandon_policy_known(cls, v: str) -> str:
        if v not in ("dismiss", "leave"):
            raise ValueError("abandon_policy must be 'dismiss' or 'leave'")
        return v


class BotModeConfig(BaseSettings):
    """Configuration for the bot's operating mode."""

    mode: str = Field("submit", validation_alias="BOT_MODE")
    valid_modes: List[str] = ["submit", "validate"]

    @model_validator(mode="after")
    def check_valid_mode(self) -> "BotModeConfig":
        if self.mode not in self.valid_modes:
            raise ValueError(
                f"Invalid BOT_MODE: {self.mode}. Must be one of {self.valid_modes}"
            )
        return self


class DiagnosticsConfig(BaseSettings):
    """Diagnostics collection settings for failed records."""

    enable_on_failure: bool = False
    capture_screenshot: bool = True
    capture_html: bool = True
    output_dir: Path = Path("./logs/diagnostics")
    max_artifacts_per_run: int = 10


class AppConfig(BaseSettings):
    """Root configuration class for the application."""

    login: LoginConfig = LoginConfig()
    site: SiteConfig = SiteConfig()
    records: RecordSourceConfig = RecordSourceConfig()
    logging: LoggingConfig = LoggingConfig()
    resilience: ResilienceConfig = ResilienceConfig()
    performance: PerformanceConfig = PerformanceConfig()
    general_settings: GeneralSettingsConfig = GeneralSettingsConfig()
    # BOT_MODE belongs to BotModeConfig.mode; keep it from matching this field
    bot_mode: BotModeConfig = Field(default_factory=BotModeConfig, validation_alias="BOT_MODE_SETTINGS")
    diagnostics: DiagnosticsConfig = DiagnosticsConfig()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        env_file_encoding="utf-8",
        extra="ignore",
        populate_by_name=True,
    )


# Instantiate the main config object
config = AppConfig()
