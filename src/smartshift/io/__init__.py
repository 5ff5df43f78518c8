"""Request and response documents."""

from smartshift.io.contract import (
    ScheduleInput,
    parse_request,
    parse_week_request,
    result_to_dict,
)

__all__ = [
    "ScheduleInput",
    "parse_request",
    "parse_week_request",
    "result_to_dict",
]
