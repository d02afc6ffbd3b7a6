"""Enums for profile domain."""

from enum import Enum


class Tier(str, Enum):
    """Subscription tier of an account."""

    FREE = "Free"
    BASIC = "Basic"
    STANDARD = "Standard"
    PREMIUM = "Premium"
    ADMIN = "Admin"
