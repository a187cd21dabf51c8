def validate_month(v: str) -> str:
    """Accept YYYY-MM month keys only."""
    parts = v.split('-')
    if len(parts) != 2 or not all(part.isdigit() for part in parts) or len(parts[0]) != 4 \
            or not 1 <= int(parts[1]) <= 12:
        raise ValueError('Month must be formatted as YYYY-MM')
    return f"{parts[0]}-{int(parts[1]):02d}"
