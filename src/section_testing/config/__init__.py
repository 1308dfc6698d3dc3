"""Configuration for section-testing.

Settings come from defaults, an optional YAML file, and
SECTION_TESTING_* environment variables, in increasing priority.
"""

from section_testing.config.settings import (
    ENV_PREFIX,
    SectionTestingConfig,
    get_config,
    load_config,
    reset_config,
    set_config,
)

__all__ = [
    "ENV_PREFIX",
    "SectionTestingConfig",
    "load_config",
    "get_config",
    "set_config",
    "reset_config",
]
