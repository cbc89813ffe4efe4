from plotgeom.adapters.normalize import NormalizedColumns, normalize_columns

__all__ = ["NormalizedColumns", "normalize_columns"]
