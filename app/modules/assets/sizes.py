_UNITS = ("Bytes", "KB", "MB", "GB", "TB")

def format_file_size(num_bytes: int) -> str:
    """Human readable size at 1024 scale: 0 -> "0 Bytes", 1536 -> "1.5 KB"."""
    num_bytes = int(num_bytes)
    if num_bytes == 0:
        return "0 Bytes"
    value = float(num_bytes)
    i = 0
    while value >= 1024 and i < len(_UNITS) - 1:
        value /= 1024
        i += 1
    # two decimals, trailing zeros dropped: 1.50 -> 1.5, 1.00 -> 1
    text = f"{round(value, 2):.2f}".rstrip("0").rstrip(".")
    return f"{text} {_UNITS[i]}"
