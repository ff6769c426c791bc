""".env loading for the API app and the test session.

Variables already exported in the shell win over values from the file unless
override=True.

Usage:

    from src.common.env import load_env
    load_env()
"""

from pathlib import Path
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from src.common.logging import get_logger

logger = get_logger(__name__)


def load_env(env_file: Optional[str] = None, override: bool = False) -> bool:
    """Load environment variables from a .env file.

    Args:
        env_file: Explicit path. If None, python-dotenv searches upward from
            the current working directory.
        override: If True, file values replace already-exported variables.

    Returns:
        True if a file was found and loaded.
    """
    path = Path(env_file) if env_file else Path(find_dotenv(usecwd=True) or ".env")
    if not path.is_file():
        logger.debug("env_file_not_found", extra={"event": "env_file_not_found", "path": str(path)})
        return False

    load_dotenv(dotenv_path=path, override=override)
    logger.debug("env_file_loaded", extra={"event": "env_file_loaded", "path": str(path)})
    return True
