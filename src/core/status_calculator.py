"""Due-date, status and reminder-timing calculations for recurring tasks.

Everything here is a pure function of its arguments. The current time is
always passed in as ``now``; nothing in this module reads the system clock.
"""

from datetime import datetime, timedelta

from src.core.config import Constants
from src.domain.task import FrequencyUnit, RecurrenceRule, TaskStatus


_ONE_DAY = timedelta(days=1)
_TWO_DAYS = timedelta(days=2)


def frequency_span(rule: RecurrenceRule) -> timedelta:
    """Duration of one recurrence interval.

    Months are a fixed 30 days, so "3 months" after Jan 1 is Mar 31.
    """
    match rule.frequency_unit:
        case FrequencyUnit.DAYS:
            return timedelta(days=rule.frequency_value)
        case FrequencyUnit.WEEKS:
            return timedelta(days=rule.frequency_value * Constants.DAYS_PER_WEEK)
        case FrequencyUnit.MONTHS:
            return timedelta(days=rule.frequency_value * Constants.DAYS_PER_MONTH)


def due_soon_threshold(rule: RecurrenceRule) -> timedelta:
    """Length of the "due soon" window, truncated to whole microseconds."""
    span_us = frequency_span(rule) // timedelta(microseconds=1)
    return timedelta(microseconds=int(span_us * Constants.DUE_SOON_FRACTION))


def calculate_due_date(*, rule: RecurrenceRule, last_completed_at: datetime | None) -> datetime | None:
    """Return when the current interval lapses.

    ``None`` means the task was never completed and must be treated as overdue.
    """
    if last_completed_at is None:
        return None

    return last_completed_at + frequency_span(rule)


def calculate_status(*, rule: RecurrenceRule, last_completed_at: datetime | None, now: datetime) -> TaskStatus:
    """Classify a task as up to date, due soon or overdue at ``now``.

    A due date exactly equal to ``now`` is DUE_SOON: the overdue check is
    strict while the due-soon check is inclusive.
    """
    due_date = calculate_due_date(rule=rule, last_completed_at=last_completed_at)

    if due_date is None:
        return TaskStatus.OVERDUE

    if due_date < now:
        return TaskStatus.OVERDUE

    due_soon_start = due_date - due_soon_threshold(rule)
    if now >= due_soon_start:
        return TaskStatus.DUE_SOON

    return TaskStatus.UP_TO_DATE


def get_notification_lead_time(rule: RecurrenceRule) -> timedelta:
    """How long before the due date the reminder fires.

    Intervals up to two weeks get 3 days' notice, longer ones 7 days.
    """
    if frequency_span(rule) <= timedelta(days=Constants.SHORT_INTERVAL_MAX_DAYS):
        return timedelta(days=Constants.SHORT_LEAD_TIME_DAYS)
    return timedelta(days=Constants.LONG_LEAD_TIME_DAYS)


def calculate_notification_time(
    *,
    rule: RecurrenceRule,
    due_date: datetime | None,
    reminder_enabled: bool,
    now: datetime,
) -> datetime | None:
    """Return when the reminder should fire, or ``None`` if none should be scheduled.

    Never-completed tasks have no due date to anchor the lead time, and a
    reminder time already in the past is dropped rather than fired late.
    """
    if due_date is None or not reminder_enabled:
        return None

    notification_time = due_date - get_notification_lead_time(rule)

    if notification_time < now:
        return None

    return notification_time


def _whole_days(delta: timedelta) -> int:
    # int() truncates toward zero, so -0.5 days is 0
    return int(delta / _ONE_DAY)


def get_due_description(*, due_date: datetime | None, now: datetime) -> str:
    """Human-readable distance to the due date ("Due tomorrow", "3 days overdue")."""
    if due_date is None:
        return "Never completed"

    diff = due_date - now

    if diff < timedelta(0):
        overdue_days = abs(_whole_days(diff))
        return "1 day overdue" if overdue_days == 1 else f"{overdue_days} days overdue"

    if diff < _ONE_DAY:
        return "Due today"

    if diff < _TWO_DAYS:
        return "Due tomorrow"

    return f"Due in {_whole_days(diff)} days"
