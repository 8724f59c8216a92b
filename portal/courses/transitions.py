"""
Course Registration State Machine

Every legal (status, event) pair is listed in ``TRANSITIONS`` together with the
resulting status and the effect on the course's enrollment counter. The ledger
looks transitions up here and never re-derives them.

    pending  --approve--> approved   (+1 seat)
    pending  --reject-->  rejected
    pending  --drop-->    dropped
    approved --reject-->  rejected   (-1 seat)
    approved --drop-->    dropped    (-1 seat)

Repeating an event on a registration that already reached its target
(approve an approved registration, ...) is a no-op. Anything else raises
``RegistrationTransitionError``.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Tuple

from core.exceptions import RegistrationTransitionError

from .models import RegistrationStatus


class RegistrationEvent(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"
    DROP = "drop"


@dataclass(frozen=True)
class Transition:
    source: RegistrationStatus
    event: RegistrationEvent
    target: RegistrationStatus
    enrollment_delta: int = 0

    @property
    def is_noop(self) -> bool:
        return self.source == self.target


_P = RegistrationStatus.PENDING
_A = RegistrationStatus.APPROVED
_R = RegistrationStatus.REJECTED
_D = RegistrationStatus.DROPPED

TRANSITIONS: Dict[Tuple[RegistrationStatus, RegistrationEvent], Transition] = {
    (t.source, t.event): t
    for t in (
        Transition(_P, RegistrationEvent.APPROVE, _A, enrollment_delta=1),
        Transition(_P, RegistrationEvent.REJECT, _R),
        Transition(_P, RegistrationEvent.DROP, _D),
        Transition(_A, RegistrationEvent.REJECT, _R, enrollment_delta=-1),
        Transition(_A, RegistrationEvent.DROP, _D, enrollment_delta=-1),
        # idempotent repeats
        Transition(_A, RegistrationEvent.APPROVE, _A),
        Transition(_R, RegistrationEvent.REJECT, _R),
        Transition(_D, RegistrationEvent.DROP, _D),
    )
}


def resolve_transition(current_status: str, event: RegistrationEvent) -> Transition:
    """
    Return the transition for ``event`` applied to ``current_status``.

    Raises:
        RegistrationTransitionError: if the event is not allowed
    """
    try:
        return TRANSITIONS[(RegistrationStatus(current_status), event)]
    except (KeyError, ValueError):
        raise RegistrationTransitionError(str(current_status), event.value) from None
