"""Read wtmp and btmp login records and report past and current sessions."""

__version__ = "0.1.0"