from datetime import datetime, timezone


def utc_now():
    """Current instant as an aware UTC datetime"""
    return datetime.now(timezone.utc)


def as_utc(value):
    """Normalize a datetime to aware UTC (naive values are assumed to be UTC)"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_iso_datetime(value):
    """Parse an ISO 8601 timestamp into aware UTC, or return None if it is not one"""
    if not value or not isinstance(value, str):
        return None
    # fromisoformat() only learned the trailing 'Z' in 3.11
    if value.endswith('Z') or value.endswith('z'):
        value = value[:-1] + '+00:00'
    try:
        return as_utc(datetime.fromisoformat(value))
    except ValueError:
        return None


def isoformat(value):
    """Render a datetime the way the JSON API exposes it"""
    value = as_utc(value)
    if value is None:
        return None
    return value.isoformat().replace('+00:00', 'Z')


def to_epoch_ms(value):
    return int(as_utc(value).timestamp() * 1000)
