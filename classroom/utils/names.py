from typing import Optional


def generate_full_name(first_name: Optional[str], last_name: Optional[str],
                       middle_name: Optional[str] = None) -> str:
    """Join name parts as "First Middle Last", skipping blank parts."""
    parts = (first_name, middle_name, last_name)
    return " ".join(part.strip() for part in parts if part and part.strip())


def full_name_sort_key(full_name: str):
    """Case-insensitive ordering key with the raw name as a stable tie-break."""
    return (full_name.casefold(), full_name)
