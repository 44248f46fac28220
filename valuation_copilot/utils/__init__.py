from .data_processing import safe_float, extract_number, format_currency, format_compact
from .validation import validate_snapshot

__all__ = ['safe_float', 'extract_number', 'format_currency', 'format_compact', 'validate_snapshot']
