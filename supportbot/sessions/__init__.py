from .registry import SessionRegistry, history_key, session_key

__all__ = ["SessionRegistry", "history_key", "session_key"]
