"""Target list loading."""

import logging
from pathlib import Path

from .strategies.errors import TargetListError

logger = logging.getLogger(__name__)


def load_targets(path: str | Path) -> list[str]:
    """
    Read site endpoints from a text file, one per line.

    Surrounding whitespace is stripped; blank lines and lines starting with
    '#' are skipped. Endpoints are not validated. Order and duplicates are
    preserved.

    Raises:
        TargetListError: The file cannot be read
    """
    path = Path(path)
    try:
        text = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise TargetListError(f"Cannot read target list {path}: {e}") from e

    targets = []
    for line in text.splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue
        targets.append(line)

    logger.info(f"ℹ️  Loaded {len(targets)} target(s) from {path}")
    return targets
