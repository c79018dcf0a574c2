from .chat import build_frame, command_frame, parse_frame

__all__ = [
    "build_frame",
    "command_frame",
    "parse_frame",
]
