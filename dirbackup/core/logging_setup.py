from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s: %(message)s"


def setup_logging(debug: bool = False) -> None:
    """Configure root logging for a CLI run; ``debug`` lowers the level to DEBUG."""
    level = logging.DEBUG if debug else logging.INFO
    logging.basicConfig(
        level=level,
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler()],
    )
    logging.getLogger().setLevel(level)
