__version__ = "0.1.0"

__all__ = [
    "__version__",
    "annotate",
    "check",
    "cli",
    "config",
    "context",
    "errors",
    "exit_codes",
    "logging",
]
