"""Logging helpers for the dashboard layer.

Avoids configuring global logging at import; entry points call
tireworks.utils.logger.setup_logging() once.
"""

from __future__ import annotations

import logging

logger = logging.getLogger("tireworks.dashboard")
