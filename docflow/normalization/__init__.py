from docflow.normalization.values import normalize_date, normalize_number, normalize_text

__all__ = ["normalize_date", "normalize_number", "normalize_text"]
