"""Configuration management for trackwatch.

Provides YAML-based target configuration with:
- The ``Config.yaml`` list-of-targets format
- A mapping format adding interval, command timeout, and logging settings
- Environment variable overrides (highest priority)
- Database settings from the environment or a ``.env`` file

Example usage:
    from trackwatch.config import load_config, load_database_config

    config = load_config("Config.yaml")
    for target in config.targets:
        print(target.path, target.commands)

    db = load_database_config()
"""

from trackwatch.config.loader import (
    DEFAULT_CONFIG_FILE,
    dict_to_config,
    get_config_path,
    load_config,
    load_targets,
)
from trackwatch.config.schema import (
    Config,
    DatabaseConfig,
    LoggingConfig,
    Target,
)
from trackwatch.config.secrets import (
    clear_secret_cache,
    fetch_secret,
    load_database_config,
    set_env_file,
)

__all__ = [
    # Main API
    "Config",
    "load_config",
    "load_targets",
    "dict_to_config",
    "get_config_path",
    "DEFAULT_CONFIG_FILE",
    # Schema types
    "Target",
    "LoggingConfig",
    "DatabaseConfig",
    # Secret management
    "fetch_secret",
    "load_database_config",
    "set_env_file",
    "clear_secret_cache",
]
