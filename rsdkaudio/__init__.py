"""Animation files, graphics-surface table and sound-effect/music mixing for a retro 2D game engine."""

__version__ = "1.3.2"
__all__ = ["animation", "drawing", "mixer", "audio"]