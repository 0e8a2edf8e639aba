from .logs import logger

__all__ = ["logger"]
