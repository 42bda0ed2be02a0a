from enum import Enum


class ErrorCode(str, Enum):
    VALIDATION_FAILED = "VALIDATION_FAILED"
    NO_FIELDS_TO_UPDATE = "NO_FIELDS_TO_UPDATE"

    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    TOKEN_MISSING = "TOKEN_MISSING"
    TOKEN_INVALID = "TOKEN_INVALID"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    FORBIDDEN = "FORBIDDEN"

    USER_NOT_FOUND = "USER_NOT_FOUND"
    EMAIL_ALREADY_REGISTERED = "EMAIL_ALREADY_REGISTERED"
    EMAIL_TAKEN = "EMAIL_TAKEN"
    CANNOT_DELETE_SELF = "CANNOT_DELETE_SELF"

    EVENT_NOT_FOUND = "EVENT_NOT_FOUND"
    EVENT_DATE_IN_PAST = "EVENT_DATE_IN_PAST"
    EVENT_TIME_RANGE_INVALID = "EVENT_TIME_RANGE_INVALID"

    RSVP_NOT_FOUND = "RSVP_NOT_FOUND"
    RSVP_EVENT_PAST = "RSVP_EVENT_PAST"

    RESOURCE_EXISTS = "RESOURCE_EXISTS"
    STORE_ERROR = "STORE_ERROR"
