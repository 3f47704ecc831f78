"""
Activity Monitor
----------------
Blocks until server-side activities (e.g. environment deactivation) reach a
terminal state, polling each pending activity.
"""

import time
from typing import Iterable, Optional

from cloudhost.core.logger import console, debug
from cloudhost.core.notifier import error, success, warning


def wait_multiple(activities: Iterable, timeout: Optional[float] = None, poll_interval: float = 2.0) -> bool:
    """
    Wait for all activities to complete.
    Returns True only if every activity completed successfully within the timeout.
    """
    pending = [a for a in activities if a is not None]
    if not pending:
        return True

    ok = True
    started = time.monotonic()
    with console.status(f"Waiting for {len(pending)} activit(ies) to complete..."):
        while pending:
            for activity in list(pending):
                if not activity.is_complete():
                    activity.refresh()
                if not activity.is_complete():
                    continue
                pending.remove(activity)
                if activity.succeeded():
                    success(f"Activity {activity.id} succeeded: {activity.description}")
                else:
                    error(f"Activity {activity.id} failed ({activity.result or activity.state}): {activity.description}")
                    ok = False
            if not pending:
                break
            if timeout is not None and time.monotonic() - started >= timeout:
                warning(f"Timed out after {timeout:g}s waiting for {len(pending)} activit(ies).")
                return False
            debug(f"{len(pending)} activit(ies) still running")
            time.sleep(poll_interval)
    return ok
