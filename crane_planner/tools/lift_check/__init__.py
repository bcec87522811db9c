from .tool import TOOL

__all__ = ["TOOL"]
