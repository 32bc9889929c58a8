"""Recording session state machine."""

from .session import RecordingSession, SessionState, SessionStats

__all__ = ["RecordingSession", "SessionState", "SessionStats"]
