"""Coverage report data model, in-memory report store and report JSON writer."""

__version__ = "0.1.0"
__all__ = ["models", "report", "report_json", "types"]