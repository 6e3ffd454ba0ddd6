"""
Monitoring infrastructure - structured logging and error tracking.
"""

from .logging_service import (
    StructuredFormatter,
    ErrorTracker,
    setup_logging,
    get_logger,
    initialize_logging,
    log_execution_time,
    log_user_interaction,
    log_fallback_used,
    log_conversation_event
)

__all__ = [
    'StructuredFormatter',
    'ErrorTracker',
    'setup_logging',
    'get_logger',
    'initialize_logging',
    'log_execution_time',
    'log_user_interaction',
    'log_fallback_used',
    'log_conversation_event'
]
