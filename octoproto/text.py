"""Small string helpers: two-way splitting and snake_case conversion."""

from __future__ import annotations


def split2(s: str, sep: str) -> tuple[str, str]:
    """Split ``s`` at the first ``sep``; the right part is empty if absent."""
    index = s.find(sep)
    if index < 0:
        return s, ""
    return s[:index], s[index + 1:]


def split2_reversed(s: str, sep: str) -> tuple[str, str]:
    """Split ``s`` at the last ``sep``; the right part is empty if absent."""
    index = s.rfind(sep)
    if index < 0:
        return s, ""
    return s[:index], s[index + 1:]


def to_snake_case(name: str) -> str:
    """Convert a CamelCase or mixedCase name to snake_case."""
    out: list[str] = []
    multiple_upper = False
    last_upper = ""
    before_upper = ""

    for char in name:
        # A non-lowercase character following an uppercase one counts as uppercase.
        is_upper = char.isupper() or (bool(last_upper) and not char.islower())

        if last_upper:
            first_in_row = not multiple_upper
            last_in_row = not is_upper
            if out and (first_in_row or last_in_row) and before_upper != "_":
                out.append("_")
            out.append(last_upper.lower())

        if is_upper:
            multiple_upper = bool(last_upper)
            last_upper = char
            continue

        out.append(char)
        last_upper = ""
        before_upper = char
        multiple_upper = False

    if last_upper:
        out.append(last_upper.lower())

    return "".join(out)