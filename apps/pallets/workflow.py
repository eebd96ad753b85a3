"""
Wave status state machine.

One table decides who may move a wave from which status to which, and which
edges emit a carrier notification. Statuses are compared after trim +
lower-case, so "INVIATA" and "inviata" are the same state.

    actor     current    requested   allowed   notification
    staff     *          *           yes       bozza→inviata: assigned
    carrier   inviata    in_corso    yes       accepted
    carrier   other      other       no        -
    customer  *          *           no        -
"""

from apps.authentication.access import STAFF, CARRIER
from .models import WaveStatus

ANY = "*"

ASSIGNED = "assigned"
ACCEPTED = "accepted"

# (actor, current, requested); ANY matches every value
TRANSITIONS = {
    (STAFF,   ANY,                ANY),
    (CARRIER, WaveStatus.INVIATA, WaveStatus.IN_CORSO),
}

# (actor, current, requested) → notification kind
NOTIFICATIONS = {
    (ANY,     WaveStatus.BOZZA,   WaveStatus.INVIATA):  ASSIGNED,
    (CARRIER, WaveStatus.INVIATA, WaveStatus.IN_CORSO): ACCEPTED,
}


def _norm(value) -> str:
    return str(value or "").strip().lower()


def _matches(rule, actor_kind, current, requested) -> bool:
    want_actor, want_current, want_requested = rule
    return (
        want_actor in (ANY, actor_kind)
        and want_current in (ANY, current)
        and want_requested in (ANY, requested)
    )


def is_transition_allowed(actor_kind: str, current, requested) -> bool:
    current, requested = _norm(current), _norm(requested)
    return any(_matches(rule, actor_kind, current, requested) for rule in TRANSITIONS)


def notification_for(actor_kind: str, current, requested):
    """Notification kind for this edge, or None."""
    current, requested = _norm(current), _norm(requested)
    for rule, kind in NOTIFICATIONS.items():
        if _matches(rule, actor_kind, current, requested):
            return kind
    return None
