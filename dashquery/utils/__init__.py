from .uid import generate_short_uid

__all__ = ["generate_short_uid"]
