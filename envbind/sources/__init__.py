"""Configuration sources.

Each source turns external input (environment variables, command-line
flags, configuration files) into raw values for the described fields.
"""

__all__ = [
    "env_vars",
    "files",
    "flags",
]
