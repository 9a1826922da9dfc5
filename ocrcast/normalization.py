"""
Text normalization applied to every engine's output before delivery.
"""


def split_lines(text: str) -> list:
    """Split on ``\\n``, dropping a trailing ``\\r`` per line and one final empty line."""
    if not text:
        return []
    lines = text.split("\n")
    if lines[-1] == "":
        lines.pop()
    return [line[:-1] if line.endswith("\r") else line for line in lines]


def normalize_text(text: str, strip_whitespace: bool = True) -> str:
    """
    Apply the whitespace policy.

    With ``strip_whitespace`` every whitespace character inside a line is
    removed (not only leading and trailing ones) while line breaks are kept.
    This suits scripts written without spaces, such as Japanese. Without it
    the text is returned unchanged.
    """
    if not strip_whitespace:
        return text
    return "\n".join(
        "".join(ch for ch in line if not ch.isspace())
        for line in split_lines(text)
    )
