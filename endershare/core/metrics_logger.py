"""
``[METRIC]`` log lines for sharing activity.

Each line names the participant and an event, followed by ``key=value``
counters, e.g.::

    [METRIC] [3f1c...] share_accept item_count=12
    [METRIC] [9ab0...] share_unshare queued_restorations=1

Item contents never appear in a metric line; callers pass counts and
flags only. Lines are emitted only when ``FEATURE_METRICS_LOGGING_ENABLED``
is on.
"""

import logging
from typing import Any, Optional

logger = logging.getLogger(__name__)


def log_metric(
    event_type: str,
    participant: Optional[Any] = None,
    **kwargs: Any
) -> None:
    """
    Emit one metric line if metrics logging is enabled.

    Args:
        event_type: Event name: share_invite, share_invite_expired,
            share_accept, share_unshare or restoration_delivered
        participant: Participant the event is attributed to; "unknown" if omitted
        **kwargs: Counters and flags appended as key=value pairs
    """
    from endershare.modules.config import config_manager
    from endershare.core.log_sanitizer import sanitize_for_logging

    if not config_manager.app_settings.feature_metrics_logging_enabled:
        return

    line = f"[METRIC] [{sanitize_for_logging(participant) if participant else 'unknown'}] {event_type}"
    if kwargs:
        line += " " + " ".join(f"{key}={sanitize_for_logging(value)}" for key, value in kwargs.items())
    logger.info(line)
