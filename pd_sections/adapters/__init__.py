from . import ai_recompute, emit_text, io_text, stream

__all__ = ["ai_recompute", "emit_text", "io_text", "stream"]
