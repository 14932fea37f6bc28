"""Hero Wars guild data export: collect API responses, build weekly guild reports."""

__version__ = "0.1.0"
