"""okrlint: lint and aggregate OKR status reports."""

__version__ = "0.1.0"
