"""Enumerations used across models."""

from enum import Enum


class FeelingLabel(str, Enum):
    """Canonical set of feelings the guide may tag a message with."""

    ANXIOUS = "anxious"
    SAD = "sad"
    MAD = "mad"
    STRESSED = "stressed"
    LONELY = "lonely"
    MIXED = "mixed"
    UNSURE = "unsure"
    CALM = "calm"
    HAPPY = "happy"
    POSITIVE = "positive"


class Escalation(str, Enum):
    """How urgently a reply should point the student toward human help.

    ``NONE`` means no nudge beyond the usual trusted-adult suggestion,
    ``ENCOURAGE_COUNSELOR`` asks the student to talk to a counselor, and
    ``CRISIS_988`` means the student should contact a crisis line now.
    """

    NONE = "none"
    ENCOURAGE_COUNSELOR = "encourage-counselor"
    CRISIS_988 = "crisis-988"
