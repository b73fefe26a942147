"""HTTP bridge to a logistics partner's FTP inbox."""

__version__ = "0.1.0"
