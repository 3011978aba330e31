"""
Helper functions for formatting data into human-readable strings, mainly for logs.
"""


def formatted_size(size_bytes: int) -> str:
    """
    Converts a size in bytes to a human-readable string (e.g., B, KB, MB, GB).

    Args:
        size_bytes: The size in bytes. Negative values are treated as 0.

    Returns:
        A formatted string with the appropriate unit.
        For example, 1536 becomes "1.50 KB", and 2097152 becomes "2 MB".
    """
    if size_bytes <= 0:
        return "0 B"

    units = ["B", "KB", "MB", "GB", "TB"]
    factor = 1024.0
    size = float(size_bytes)

    for unit in units:
        if size < factor:
            if unit == "B":
                return f"{int(size)} {unit}"
            # Clean up ".00" for whole numbers (e.g., "2.00 MB" -> "2 MB").
            return f"{size:.2f} {unit}".replace(".00", "")
        size /= factor

    return f"{size:.2f} {units[-1]}".replace(".00", "")
