"""Work order lifecycle and SLA tracking engine for property maintenance."""

__version__ = "0.1.0"
