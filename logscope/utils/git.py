"""Git repository utilities for logscope.

Config discovery looks for a ``logscope.toml`` at the repository root.
"""

import os
from pathlib import Path
from typing import Optional

GIT_ROOT_ENV = "LOGSCOPE_GIT_ROOT"


def find_git_root(start_path: Optional[Path] = None) -> Optional[Path]:
    """Find the root directory of the enclosing git repository.

    The LOGSCOPE_GIT_ROOT environment variable, when set, is returned as-is
    without checking that it exists.

    Args:
        start_path: Directory to start from; defaults to the current
            working directory.

    Returns:
        The directory containing ``.git``, or None outside a repository.
    """
    env_override = os.environ.get(GIT_ROOT_ENV)
    if env_override:
        return Path(env_override)

    current = Path.cwd() if start_path is None else Path(start_path).resolve()

    for candidate in (current, *current.parents):
        if (candidate / ".git").exists():
            return candidate

    return None
