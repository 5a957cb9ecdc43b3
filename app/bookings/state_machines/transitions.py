"""
django-fsm transition decorator that raises domain errors.

django-fsm raises TransitionNotAllowed when a transition method is called
from a state it does not list as a source. Models in this app declare their
transitions with ``guarded_transition`` instead, which converts that into
InvalidStateTransitionError carrying the aggregate id and both states.

Usage:
    class Payment(models.Model):
        status = FSMField(default=PaymentStatus.PENDING, protected=True)

        @guarded_transition(
            field=status,
            source=[PaymentStatus.PENDING, PaymentStatus.PROCESSING],
            target=PaymentStatus.CANCELLED,
        )
        def cancel(self, reason=None):
            ...

    payment.cancel()   # raises InvalidStateTransitionError once terminal

Note:
    The wrapped method keeps django-fsm's metadata, so can_proceed() and
    get_available_status_transitions() keep working.
"""

from __future__ import annotations

import functools

from django_fsm import TransitionNotAllowed, transition

from bookings.exceptions import InvalidStateTransitionError


def guarded_transition(field, source, target, **kwargs):
    """
    Declare a django-fsm transition that raises InvalidStateTransitionError.

    Args:
        field: The FSMField the transition operates on
        source: Allowed source state(s), or "*"
        target: State reached on success
        **kwargs: Passed through to django_fsm.transition (conditions, ...)

    Returns:
        Decorator for the transition method
    """

    def decorator(func):
        fsm_method = transition(field=field, source=source, target=target, **kwargs)(
            func
        )

        @functools.wraps(fsm_method)
        def wrapper(instance, *args, **kw):
            try:
                return fsm_method(instance, *args, **kw)
            except TransitionNotAllowed:
                raise InvalidStateTransitionError(
                    aggregate_type=instance.__class__.__name__,
                    aggregate_id=instance.pk,
                    current_state=getattr(instance, field.name),
                    target_state=target,
                    transition=func.__name__,
                ) from None

        return wrapper

    return decorator
