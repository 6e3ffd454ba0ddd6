"""
Development environment configuration overrides
"""

from dataclasses import dataclass
from config.app_config import AppConfig, BackendConfig


@dataclass
class DevelopmentConfig(AppConfig):
    """Development environment configuration"""
    
    def __post_init__(self):
        
        # Development-specific overrides
        self.environment = "development"
        self.debug = True
        self.backend = BackendConfig.from_secrets()
        
        # More verbose logging in development
        self.logging.level = "DEBUG"
        self.logging.enable_file_logging = True
        self.logging.log_file = "logs/dev-app.log"
        
        # Development UI changes
        self.ui.app_title = "🧪 ChatFS (DEV)"

        # Probe the local backend more often while iterating on it
        self.backend.health_poll_interval_seconds = 10.0
        self.backend.max_retries = 0


def get_development_config() -> DevelopmentConfig:
    """Get development-specific configuration"""
    return DevelopmentConfig()
