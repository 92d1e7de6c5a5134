"""Configuration settings for the statement analysis service."""

import os
from typing import Optional, List
from dataclasses import dataclass, field

from statement_analyzer.utils.exceptions import ValidationError

# File Paths
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
LOGS_DIR = os.getenv("LOGS_DIR", os.path.join(BASE_DIR, "logs"))
TEMP_DIR = os.getenv("TEMP_DIR", os.path.join(BASE_DIR, "temp"))

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Server
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3001

# Gemini
DEFAULT_GEMINI_MODEL = "gemini-2.0-flash"
DEFAULT_TEMPERATURE = 0.1
DEFAULT_MAX_OUTPUT_TOKENS = 8192

# Sessions
SESSION_MAX_AGE_SECONDS = 3600
SWEEP_INTERVAL_SECONDS = 3600

# Uploads
MAX_UPLOAD_SIZE_MB = 10
SUPPORTED_PDF_CONTENT_TYPES = ["application/pdf"]

# Prompt window
MAX_PROMPT_CHARS = 50000
PROMPT_HEAD_CHARS = 40000
PROMPT_TAIL_CHARS = 10000
RAW_RESPONSE_PREVIEW_CHARS = 1000

# Currency Configuration
CURRENCY_SYMBOL = os.getenv("CURRENCY_SYMBOL", "₹")

# Celery Configuration
CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://localhost:6379/0")
CELERY_RESULT_BACKEND = os.getenv("CELERY_RESULT_BACKEND", "redis://localhost:6379/0")
CELERY_TASK_SERIALIZER = "json"
CELERY_RESULT_SERIALIZER = "json"
CELERY_ACCEPT_CONTENT = ["json"]
CELERY_TIMEZONE = "UTC"


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).lower() == "true"


@dataclass
class Settings:
    """Configuration settings class."""

    # Gemini
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    temperature: float = DEFAULT_TEMPERATURE
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS

    # Server
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    cors_origins: List[str] = field(default_factory=lambda: ["*"])

    # Logging
    log_level: str = "INFO"
    log_format: str = LOG_FORMAT

    # File System
    logs_dir: str = LOGS_DIR
    temp_dir: str = TEMP_DIR

    # Sessions
    session_max_age_seconds: int = SESSION_MAX_AGE_SECONDS
    sweep_interval_seconds: int = SWEEP_INTERVAL_SECONDS
    sweep_in_process: bool = True

    # Uploads
    max_upload_size_mb: int = MAX_UPLOAD_SIZE_MB
    download_timeout_seconds: float = 30.0

    # Prompt
    max_prompt_chars: int = MAX_PROMPT_CHARS
    prompt_head_chars: int = PROMPT_HEAD_CHARS
    prompt_tail_chars: int = PROMPT_TAIL_CHARS
    raw_response_preview_chars: int = RAW_RESPONSE_PREVIEW_CHARS

    # Report
    currency_symbol: str = CURRENCY_SYMBOL

    # Celery Configuration
    celery_broker_url: str = CELERY_BROKER_URL
    celery_result_backend: str = CELERY_RESULT_BACKEND
    celery_task_serializer: str = CELERY_TASK_SERIALIZER
    celery_result_serializer: str = CELERY_RESULT_SERIALIZER
    celery_accept_content: List[str] = field(default_factory=lambda: CELERY_ACCEPT_CONTENT.copy())
    celery_timezone: str = CELERY_TIMEZONE

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""
        origins = os.getenv("CORS_ORIGINS", "*")
        return cls(
            gemini_api_key=os.getenv("GEMINI_API_KEY"),
            gemini_model=os.getenv("GEMINI_MODEL", DEFAULT_GEMINI_MODEL),
            temperature=float(os.getenv("GEMINI_TEMPERATURE", str(DEFAULT_TEMPERATURE))),
            max_output_tokens=int(os.getenv("GEMINI_MAX_OUTPUT_TOKENS", str(DEFAULT_MAX_OUTPUT_TOKENS))),
            host=os.getenv("HOST", DEFAULT_HOST),
            port=int(os.getenv("PORT", str(DEFAULT_PORT))),
            cors_origins=[origin.strip() for origin in origins.split(",") if origin.strip()],
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", LOG_FORMAT),
            logs_dir=os.getenv("LOGS_DIR", LOGS_DIR),
            temp_dir=os.getenv("TEMP_DIR", TEMP_DIR),
            session_max_age_seconds=int(os.getenv("SESSION_MAX_AGE_SECONDS", str(SESSION_MAX_AGE_SECONDS))),
            sweep_interval_seconds=int(os.getenv("SWEEP_INTERVAL_SECONDS", str(SWEEP_INTERVAL_SECONDS))),
            sweep_in_process=_env_bool("SWEEP_IN_PROCESS", "True"),
            max_upload_size_mb=int(os.getenv("MAX_UPLOAD_SIZE_MB", str(MAX_UPLOAD_SIZE_MB))),
            download_timeout_seconds=float(os.getenv("DOWNLOAD_TIMEOUT_SECONDS", "30")),
            max_prompt_chars=int(os.getenv("MAX_PROMPT_CHARS", str(MAX_PROMPT_CHARS))),
            prompt_head_chars=int(os.getenv("PROMPT_HEAD_CHARS", str(PROMPT_HEAD_CHARS))),
            prompt_tail_chars=int(os.getenv("PROMPT_TAIL_CHARS", str(PROMPT_TAIL_CHARS))),
            raw_response_preview_chars=int(
                os.getenv("RAW_RESPONSE_PREVIEW_CHARS", str(RAW_RESPONSE_PREVIEW_CHARS))
            ),
            currency_symbol=os.getenv("CURRENCY_SYMBOL", CURRENCY_SYMBOL),
            celery_broker_url=os.getenv("CELERY_BROKER_URL", CELERY_BROKER_URL),
            celery_result_backend=os.getenv("CELERY_RESULT_BACKEND", CELERY_RESULT_BACKEND),
        )

    def validate(self) -> bool:
        """Validate settings."""
        return (
            0 < self.port < 65536 and
            0.0 <= self.temperature <= 2.0 and
            self.max_output_tokens > 0 and
            self.session_max_age_seconds > 0 and
            self.sweep_interval_seconds > 0 and
            self.max_upload_size_mb > 0 and
            self.prompt_head_chars + self.prompt_tail_chars <= self.max_prompt_chars and
            len(self.currency_symbol) > 0
        )

    def require_valid(self) -> None:
        """Raise ValidationError unless ``validate`` passes."""
        if not self.validate():
            raise ValidationError(
                "Invalid settings, check port, limits and that the prompt head and tail fit the prompt window"
            )

    def get_log_level(self) -> str:
        """Get log level as string."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() in valid_levels:
            return self.log_level.upper()
        return "INFO"

    def get_max_upload_size_bytes(self) -> int:
        """Get max upload size in bytes."""
        return self.max_upload_size_mb * 1024 * 1024

    def has_gemini_api_key(self) -> bool:
        return bool(self.gemini_api_key and self.gemini_api_key.strip())

    def is_debug_enabled(self) -> bool:
        """Check if debug mode is enabled."""
        return self.log_level.upper() == "DEBUG"

    def create_directories(self) -> None:
        """Create necessary directories."""
        for directory in [self.logs_dir, self.temp_dir]:
            os.makedirs(directory, exist_ok=True)
