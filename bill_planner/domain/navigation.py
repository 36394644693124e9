"""View modes and month navigation.

The viewing cursor sits before (past), on (active) or after (preview) the
active month. What the user may do, and where "next"/"previous" lead, is
looked up in the tables below instead of being re-derived at each call site.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, Tuple

from bill_planner.utils.date_utils import add_months_to_month, compare_months


class ViewMode(str, Enum):
    PAST = "past"
    ACTIVE = "active"
    PREVIEW = "preview"


class NavAction(str, Enum):
    PREVIOUS = "previous"
    NEXT = "next"


class NavOutcome(str, Enum):
    MOVED = "moved"
    ROLLOVER_READY = "rollover_ready"  # active month complete; caller should confirm a new month
    BLOCKED = "blocked"  # outside the navigation window


@dataclass(frozen=True)
class Capabilities:
    """Operations allowed while viewing a month"""

    record_payment: bool
    add_bill: bool
    edit_bill: bool
    start_rollover: bool


CAPABILITIES: Dict[ViewMode, Capabilities] = {
    ViewMode.PAST: Capabilities(record_payment=False, add_bill=False, edit_bill=False, start_rollover=False),
    ViewMode.ACTIVE: Capabilities(record_payment=True, add_bill=True, edit_bill=True, start_rollover=True),
    ViewMode.PREVIEW: Capabilities(record_payment=True, add_bill=True, edit_bill=False, start_rollover=False),
}


@dataclass(frozen=True)
class Navigation:
    viewing_month: str
    outcome: NavOutcome


def view_mode(viewing_month: str, active_month: str) -> ViewMode:
    order = compare_months(viewing_month, active_month)
    if order < 0:
        return ViewMode.PAST
    if order > 0:
        return ViewMode.PREVIEW
    return ViewMode.ACTIVE


def capabilities_for(viewing_month: str, active_month: str) -> Capabilities:
    return CAPABILITIES[view_mode(viewing_month, active_month)]


def _step(months: int) -> Callable[[str, bool], Navigation]:
    def move(viewing_month: str, active_month_complete: bool) -> Navigation:
        return Navigation(add_months_to_month(viewing_month, months), NavOutcome.MOVED)

    return move


def _next_from_active(viewing_month: str, active_month_complete: bool) -> Navigation:
    if active_month_complete:
        return Navigation(viewing_month, NavOutcome.ROLLOVER_READY)
    return Navigation(add_months_to_month(viewing_month, 1), NavOutcome.MOVED)


TRANSITIONS: Dict[Tuple[ViewMode, NavAction], Callable[[str, bool], Navigation]] = {
    (ViewMode.PAST, NavAction.PREVIOUS): _step(-1),
    (ViewMode.PAST, NavAction.NEXT): _step(1),
    (ViewMode.ACTIVE, NavAction.PREVIOUS): _step(-1),
    (ViewMode.ACTIVE, NavAction.NEXT): _next_from_active,
    (ViewMode.PREVIEW, NavAction.PREVIOUS): _step(-1),
    (ViewMode.PREVIEW, NavAction.NEXT): _step(1),
}


def navigate(
    viewing_month: str,
    active_month: str,
    action: NavAction,
    active_month_complete: bool,
    window_months: int = 12,
) -> Navigation:
    """
    Move the viewing cursor one month.

    Moving forward from a complete active month does not move the cursor; it
    reports ROLLOVER_READY so the caller can confirm a new month. Moves that
    would leave the +/- window_months range around the active month are
    BLOCKED.
    """
    mode = view_mode(viewing_month, active_month)
    result = TRANSITIONS[(mode, NavAction(action))](viewing_month, active_month_complete)

    if result.outcome != NavOutcome.MOVED:
        return result

    earliest = add_months_to_month(active_month, -window_months)
    latest = add_months_to_month(active_month, window_months)
    if compare_months(result.viewing_month, earliest) < 0 or compare_months(result.viewing_month, latest) > 0:
        return Navigation(viewing_month, NavOutcome.BLOCKED)

    return result
