"""Expose commonly used model classes at the package level.

Importing these classes here allows consumers to write concise imports like::

    from wellbeing_chat.models import ChatRequest, StructuredReply
"""

from .chat_request import ChatRequest  # noqa: F401
from .chat_response import StructuredReply, fallback_reply  # noqa: F401
from .enums import Escalation, FeelingLabel  # noqa: F401
