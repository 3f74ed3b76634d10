"""Upstream API response codes that can put a caller into cooldown."""

from enum import IntEnum


class ErrorCode(IntEnum):
    """Schedules Direct JSON API response codes."""

    OK = 0
    INVALID_JSON = 1001
    DEFLATE_REQUIRED = 1002
    TOKEN_MISSING = 1004
    UNSUPPORTED_COMMAND = 2000
    REQUIRED_ACTION_MISSING = 2001
    REQUIRED_REQUEST_MISSING = 2002
    REQUIRED_PARAMETER_MISSING_COUNTRY = 2004
    REQUIRED_PARAMETER_MISSING_POSTALCODE = 2005
    REQUIRED_PARAMETER_MISSING_MSGID = 2006
    INVALID_PARAMETER_COUNTRY = 2050
    INVALID_PARAMETER_POSTALCODE = 2051
    INVALID_PARAMETER_FETCHTYPE = 2052
    DUPLICATE_LINEUP = 2100
    LINEUP_NOT_FOUND = 2101
    UNKNOWN_LINEUP = 2102
    INVALID_LINEUP_DELETE = 2103
    LINEUP_WRONG_FORMAT = 2104
    INVALID_LINEUP = 2105
    LINEUP_DELETED = 2106
    LINEUP_QUEUED = 2107
    INVALID_COUNTRY = 2108
    STATIONID_NOT_FOUND = 2200
    SERVICE_OFFLINE = 3000
    ACCOUNT_EXPIRED = 4001
    INVALID_HASH = 4002
    INVALID_USER = 4003
    ACCOUNT_LOCKOUT = 4004
    ACCOUNT_DISABLED = 4005
    TOKEN_EXPIRED = 4006
    MAX_LINEUP_CHANGES_REACHED = 4100
    MAX_LINEUPS = 4101
    NO_LINEUPS = 4102
    IMAGE_NOT_FOUND = 5000
    INVALID_PROGRAMID = 5001
    PROGRAMID_QUEUED = 5002
    SCHEDULE_NOT_FOUND = 7000
    INVALID_SCHEDULE_REQUEST = 7010
    SCHEDULE_RANGE_EXCEEDED = 7020
    SCHEDULE_NOT_IN_LINEUP = 7030
    SCHEDULE_QUEUED = 7100
    HCF = 9999
