"""TCP echo servers: a line-buffered sequential one and a threaded one."""

__version__ = "0.1.0"
__all__ = ["lines", "line_server", "threaded_server"]