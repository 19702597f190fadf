"""Exception types raised by the reflection core.

Configuration problems are fatal and surface at load time; the two session
errors guard caller misuse of a ``ConversationSession``.
"""

from __future__ import annotations


class ConfigurationError(RuntimeError):
    """Static graph or profile catalog data is inconsistent."""


class SessionCompleteError(RuntimeError):
    """An answer was submitted to a session that already reached the end."""


class SessionNotReadyError(RuntimeError):
    """Finishing was requested before enough answers were recorded."""
