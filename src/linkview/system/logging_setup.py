# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/system/logging_setup.py

import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from linkview.config.manager import load_merged_user_config


def detect_view_name(config_path: Optional[Path] = None) -> Optional[str]:
    """Detect current view name from .linkview.yml or directory name.

    Returns:
        View name or None if not detected
    """
    try:
        from linkview.config.manager import find_view_config_path, ViewConfig

        path = config_path or find_view_config_path()
        return ViewConfig.load(path).name

    except Exception:
        pass
    cwd = Path.cwd()
    if cwd.name and cwd.name != "/":
        return cwd.name

    return None


def setup_logging(debug: bool = False, config_path: Optional[Path] = None) -> None:
    """Setup loguru logging for the entire application.

    Configures:
    - Console output: WARNING+ only (DEBUG+ with debug=True)
    - File output: DEBUG+ if local_log is configured in user config
    """
    logger.remove()

    logger.add(
        sys.stderr,
        level="DEBUG" if debug else "WARNING",
        format="<level>{level}</level>: {message}",
        colorize=True
    )

    try:
        user_config = load_merged_user_config()
        if user_config.local_log:
            log_dir = Path(user_config.local_log)
            log_dir.mkdir(parents=True, exist_ok=True)

            view_name = detect_view_name(config_path) or "global"
            log_file = log_dir / f"linkview-{view_name}.log"

            logger.add(
                log_file,
                level="DEBUG",
                format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
                rotation="10 MB",
                retention="30 days",
                compression="gz"
            )
            logger.debug(f"File logging enabled: {log_file}")

    except Exception as e:
        # Don't fail the entire application if logging setup fails
        logger.warning(f"Failed to setup file logging: {e}")
