from .helpers import as_utc, isoformat, parse_iso_datetime, to_epoch_ms, utc_now
from .i18n import get_language

__all__ = ['as_utc', 'isoformat', 'parse_iso_datetime', 'to_epoch_ms', 'utc_now', 'get_language']
