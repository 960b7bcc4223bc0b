from .io import safe_read_file

__all__ = ["safe_read_file"]
