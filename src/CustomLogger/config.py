"""
Logging profiles for RefHarmonizer
"""

import os
from typing import Dict, Any

# Base profile; LOG_ENV picks one of the overrides below
DEFAULT_LOG_CONFIG = {
    'console_level': 'INFO',
    'log_file': 'out.log',  # None disables the file handler
    'file_level': 'DEBUG',
    'format': "%(asctime)s - %(levelname)s - %(name)s: %(message)s",
    'datefmt': "%d/%m/%Y %I:%M:%S %p",

    # Batch timings slower than this go to INFO, faster ones to DEBUG
    'performance_threshold_ms': 100,
}

ENV_CONFIGS = {
    'development': {
        'console_level': 'DEBUG',
    },
    'production': {
        'performance_threshold_ms': 1000,
    },
    'testing': {
        'console_level': 'WARNING',
        'log_file': None,
    },
}


def get_log_config(environment: str = None) -> Dict[str, Any]:
    """
    Resolve the logging profile.

    Args:
        environment: 'development', 'production' or 'testing'; read from
            LOG_ENV when omitted. Unknown names fall back to the base profile.

    Returns:
        Profile dict. A LOG_FILE variable replaces the file path, and an
        empty LOG_FILE turns file logging off.
    """
    environment = environment or os.getenv('LOG_ENV', 'development')
    config = {**DEFAULT_LOG_CONFIG, **ENV_CONFIGS.get(environment, {})}

    log_file = os.getenv('LOG_FILE')
    if log_file is not None:
        config['log_file'] = log_file or None
    return config


LOG_EMOJIS = {
    'start': '🚀',
    'error': '💥',
    'progress': '📊',
    'performance': '⚡',
}
