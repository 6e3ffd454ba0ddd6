"""
Production environment configuration overrides
"""

from dataclasses import dataclass
from config.app_config import AppConfig, BackendConfig


@dataclass
class ProductionConfig(AppConfig):
    """Production environment configuration"""
    
    def __post_init__(self):
        
        # Production-specific overrides
        self.environment = "production"
        self.debug = False
        self.backend = BackendConfig.from_secrets()
        
        # Production logging - warnings and errors only, same as AppConfig.load()
        self.logging.level = "WARNING"
        self.logging.enable_file_logging = True
        self.logging.log_file = "logs/prod-app.log"
        
        self.ui.app_title = "🗂️ ChatFS"
        
        # Fail fast so degraded mode kicks in quickly
        self.backend.request_timeout_seconds = 3.0
        self.backend.failure_threshold = 3
        self.backend.max_retries = 1


def get_production_config() -> ProductionConfig:
    """Get production-specific configuration"""
    return ProductionConfig()
