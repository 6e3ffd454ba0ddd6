"""
Unified Configuration System for ChatFS

Backend, streaming, chat, UI and logging settings live in nested dataclasses under AppConfig.
Backend connection details come from Streamlit secrets or CHATFS_* environment variables.
"""

from dataclasses import dataclass, field
from typing import Dict, Any, Optional, List
import streamlit as st
import os
from pathlib import Path


DEFAULT_BACKEND_TIMEOUT = 5.0


@dataclass
class BackendConfig:
    """Workspace backend connection settings"""
    base_url: str = ""
    request_timeout_seconds: float = DEFAULT_BACKEND_TIMEOUT
    health_poll_interval_seconds: float = 30.0
    health_probe_path: str = "non-existent-file-for-health-check.txt"
    search_top_k: int = 10
    failure_threshold: int = 5
    recovery_timeout: int = 60
    max_retries: int = 0

    @classmethod
    def from_secrets(cls) -> 'BackendConfig':
        """Load backend config from Streamlit secrets"""
        # Under pytest, secrets are never read
        if os.getenv("PYTEST_CURRENT_TEST") is not None:
            return cls._from_env()

        try:
            return cls(
                base_url=st.secrets.get("CHATFS_BACKEND_URL", ""),
                request_timeout_seconds=float(
                    st.secrets.get("CHATFS_BACKEND_TIMEOUT", DEFAULT_BACKEND_TIMEOUT)
                ),
            )
        except Exception:
            # No secrets file
            return cls._from_env()

    @classmethod
    def _from_env(cls) -> 'BackendConfig':
        return cls(
            base_url=os.getenv("CHATFS_BACKEND_URL", ""),
            request_timeout_seconds=float(
                os.getenv("CHATFS_BACKEND_TIMEOUT", DEFAULT_BACKEND_TIMEOUT)
            ),
        )

    @property
    def is_offline(self) -> bool:
        return not self.base_url

    def to_dict(self) -> Dict[str, Any]:
        return {
            "base_url": self.base_url,
            "request_timeout_seconds": self.request_timeout_seconds,
            "health_poll_interval_seconds": self.health_poll_interval_seconds,
            "search_top_k": self.search_top_k,
        }


@dataclass
class StreamingConfig:
    """Simulated response streaming configuration"""
    # Pacing profiles are expressed in milliseconds
    time_unit_seconds: float = 0.001


@dataclass
class ChatConfig:
    """Thread and message behaviour"""
    title_max_length: int = 30
    title_placeholder: str = "New Chat"
    default_model: str = "gpt-4"
    current_user_id: str = "user-1"
    max_input_length: int = 2000


@dataclass
class UIConfig:
    """Titles and copy shown by the Streamlit shell"""
    app_title: str = "🗂️ ChatFS"
    welcome_title: str = "Welcome to ChatFS"
    welcome_message: str = (
        "Start chatting with your files and folders. I can help you "
        "explore, analyze, and work with your file system."
    )
    tip_message: str = "💡 Tip: mention files with @path/to/file to preview them inline"
    input_placeholder: str = "Ask about your files, use @mentions to reference them..."


@dataclass
class LoggingConfig:
    """Log level, file output and the human-readable console format used in debug mode"""
    level: str = "INFO"
    format: str = "%(asctime)s %(levelname)-7s %(name)s: %(message)s [%(filename)s:%(lineno)d]"
    enable_file_logging: bool = True
    log_file: str = "logs/app.log"


@dataclass
class AppConfig:
    """Root ChatFS configuration"""
    backend: BackendConfig = field(default_factory=BackendConfig)
    streaming: StreamingConfig = field(default_factory=StreamingConfig)
    chat: ChatConfig = field(default_factory=ChatConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    # Environment settings
    environment: str = field(default_factory=lambda: os.getenv("APP_ENV", "development"))
    debug: bool = field(default_factory=lambda: os.getenv("DEBUG", "false").lower() == "true")

    @classmethod
    def load(cls) -> 'AppConfig':
        """Build the configuration for APP_ENV, reading backend settings from secrets"""
        config = cls()

        config.backend = BackendConfig.from_secrets()

        # Log level follows the environment
        if config.environment == "production":
            config.debug = False
            config.logging.level = "WARNING"
        elif config.environment == "development":
            config.debug = True
            config.logging.level = "DEBUG"

        return config

    def validate(self) -> List[str]:
        """Check value ranges; returns human-readable problems, empty when valid"""
        errors = []

        if self.backend.request_timeout_seconds <= 0:
            errors.append("Backend request timeout must be positive")

        if self.backend.health_poll_interval_seconds <= 0:
            errors.append("Health poll interval must be positive")

        if self.backend.search_top_k < 1:
            errors.append("Search top_k must be at least 1")

        if self.chat.title_max_length < 1:
            errors.append("Thread title length must be at least 1")

        if self.logging.enable_file_logging:
            log_dir = Path(self.logging.log_file).parent
            if not log_dir.exists():
                log_dir.mkdir(parents=True, exist_ok=True)

        return errors


_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Process-wide configuration, loaded and validated on first use"""
    global _config
    if _config is None:
        _config = AppConfig.load()

        errors = _config.validate()
        if errors:
            import warnings
            for error in errors:
                warnings.warn(f"Configuration error: {error}")

    return _config


def reload_config() -> AppConfig:
    """Drop the cached configuration and load it again"""
    global _config
    _config = None
    return get_config()


def get_backend_config() -> BackendConfig:
    """Get backend connection configuration"""
    return get_config().backend
