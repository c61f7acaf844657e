"""Environment and logging helpers"""

import logging
import os


LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
DEFAULT_LOG_LEVEL = 'WARNING'

logger = logging.getLogger(__name__)


def get_int_env(name: str) -> int | None:
    """Read a positive integer from the environment.

    Returns None when the variable is unset, empty, not a number or not positive.
    """
    value = os.environ.get(name, '').strip()
    if not value:
        return None
    try:
        number = int(value)
    except ValueError:
        logger.warning(f'Ignoring non-integer {name}={value!r}')
        return None
    if number <= 0:
        return None
    return number


def env_flag(name: str) -> bool:
    return os.environ.get(name, '').lower() in ('1', 'true', 'yes')


def configure_logging(debug: bool = False) -> int:
    """Configure root logging for the CLI and return the effective level."""
    if debug or env_flag('GROUPBY_DEBUG'):
        level = logging.DEBUG
    else:
        level_name = os.getenv('GROUPBY_LOG_LEVEL', DEFAULT_LOG_LEVEL).upper()
        level = getattr(logging, level_name, logging.WARNING)
        if not isinstance(level, int):
            level = logging.WARNING
    logging.basicConfig(level=level, format=LOG_FORMAT, force=True)
    return level
