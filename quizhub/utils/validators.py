"""Validation utilities"""

import re

USERNAME_PATTERN = re.compile(r"^[A-Za-z0-9_\-一-鿿]{3,30}$")
OPTION_LABELS = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"


def validate_username(username: str) -> str:
    """Strip and check a username; letters, digits, CJK, '_' and '-'"""
    username = username.strip()
    if not USERNAME_PATTERN.match(username):
        raise ValueError("Username must be 3-30 letters, digits, '_' or '-'")
    return username


def normalize_email(email: str) -> str:
    return email.strip().lower()


def option_label(position: int) -> str:
    """A, B, ... Z, then A1, B1, ... for absurdly long option lists"""
    letter = OPTION_LABELS[position % len(OPTION_LABELS)]
    cycle = position // len(OPTION_LABELS)
    return letter if cycle == 0 else f"{letter}{cycle}"


def label_position(label: str) -> int:
    """Inverse of option_label for single letters; -1 when not a letter label"""
    label = label.strip().upper()
    if len(label) == 1 and label in OPTION_LABELS:
        return OPTION_LABELS.index(label)
    return -1
