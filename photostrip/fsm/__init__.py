from .session_fsm import SessionFSM, SessionPhase

__all__ = ["SessionFSM", "SessionPhase"]
