from __future__ import annotations


class PlotDataError(ValueError):
    """Raised when caller-supplied chart input cannot be used."""
