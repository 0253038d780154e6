__version__ = "0.1.0"

__all__ = [
    "__version__",
    "analyzer",
    "cli",
    "config",
    "contracts",
    "core",
    "errors",
    "exit_codes",
    "metrics",
    "model",
]
