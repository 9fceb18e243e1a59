from .connection_manager import ConnectionManager, build_frame

__all__ = ["ConnectionManager", "build_frame"]
