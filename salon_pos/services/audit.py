from __future__ import annotations

import logging
from datetime import datetime, timezone

from ..utils.atomic_file import append_jsonl_atomic

logger = logging.getLogger(__name__)


def log_action(store, action: str, **details) -> None:
    """Append a sensitive mutation to the action log. Never raises."""
    entry = {"timestamp": datetime.now(timezone.utc).isoformat(), "action": action, **details}
    try:
        append_jsonl_atomic(store.action_log_path, entry)
    except Exception:
        logger.exception("Failed to write action log entry %s", action)
