"""Single-host installer for the Happy Server container stack."""

__version__ = "1.0.0"
