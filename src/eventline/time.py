# SPDX-License-Identifier: MIT

from typing import Optional, cast

import pendulum


def now_utc() -> pendulum.DateTime:
    return pendulum.now("UTC")


def today_local() -> pendulum.DateTime:
    return pendulum.today("local")


def start_of_local_day(datetime: pendulum.DateTime) -> pendulum.DateTime:
    return datetime.in_tz("local").start_of("day")


def end_of_local_day(datetime: pendulum.DateTime) -> pendulum.DateTime:
    """Last representable millisecond of the local day: 23:59:59.999."""
    return start_of_local_day(datetime).set(
        hour=23, minute=59, second=59, microsecond=999000
    )


def days_between(start: pendulum.DateTime, end: pendulum.DateTime) -> int:
    """Calendar days between the local dates of both arguments.

    Counted on dates rather than elapsed seconds so 23 and 25 hour days around
    DST changes still count as one day.
    """
    return start_of_local_day(end).toordinal() - start_of_local_day(start).toordinal()


def datetime_to_iso_str(datetime: pendulum.DateTime) -> str:
    return datetime.in_tz("UTC").isoformat()


def datetime_to_iso_str_optional(
    datetime: Optional[pendulum.DateTime],
) -> Optional[str]:
    if datetime is None:
        return None
    return datetime_to_iso_str(datetime)


def datetime_from_str(datetime: str) -> pendulum.DateTime:
    return cast(pendulum.DateTime, pendulum.parse(datetime))


def datetime_from_str_optional(datetime: Optional[str]) -> Optional[pendulum.DateTime]:
    if datetime is None or datetime == "":
        return None
    return datetime_from_str(datetime)


def datetime_from_local_date_str(date_str: str) -> pendulum.DateTime:
    """Parse a local date string in 'YYYY-MM-DD' format to a pendulum.DateTime at midnight local time."""
    return cast(pendulum.DateTime, pendulum.parse(date_str, tz="local"))


def datetime_to_display_local_date_str(datetime: pendulum.DateTime) -> str:
    return datetime.in_tz("local").format("YYYY-MM-DD ddd")


def datetime_to_display_local_date_str_optional(
    datetime: Optional[pendulum.DateTime],
) -> Optional[str]:
    if datetime is None:
        return None
    return datetime_to_display_local_date_str(datetime)


def datetime_to_short_day_str(datetime: pendulum.DateTime) -> str:
    return datetime.in_tz("local").format("MMM D")


def datetime_to_month_str(datetime: pendulum.DateTime) -> str:
    return datetime.in_tz("local").format("MMM YYYY")
