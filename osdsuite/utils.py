"""Utility functions for testsuite"""

import secrets


def generate_tail(tail=5):
    """Returns random suffix"""
    return secrets.token_urlsafe(tail).translate(str.maketrans("", "", "-_")).lower()[:tail]


def randomize(name, tail=5):
    "To avoid conflicts returns modified name with random suffix"
    return f"{name}-{generate_tail(tail)}"


def check_condition(condition, condition_type, status, reason=None):
    """Checks if condition matches expectation, won't check reason if it is None"""
    return (
        condition.type == condition_type
        and condition.status == status
        and (reason is None or reason == condition.reason)
    )
