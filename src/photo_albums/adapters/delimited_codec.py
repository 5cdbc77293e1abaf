"""Escaped delimiter-separated line encoding.

Each field is escaped so that a record always fits on a single line:
newline, carriage return, tab, backslash, backspace, form feed and the
delimiter itself are written as two-character backslash sequences.
"""

from collections.abc import Iterable

DELIMITER = ";"
ESCAPE = "\\"

_ENCODE = {
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
}

_DECODE = {
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "\\": "\\",
    "b": "\b",
    "f": "\f",
}


def encode_fields(fields: Iterable[str | None], delimiter: str = DELIMITER) -> str:
    """Encode fields into one line. ``None`` is written as an empty field."""
    table = {**_ENCODE, delimiter: ESCAPE + delimiter}
    return delimiter.join(
        "".join(table.get(char, char) for char in value or "") for value in fields
    )


def decode_fields(line: str, delimiter: str = DELIMITER) -> list[str]:
    """Split an encoded line back into its fields.

    Unknown escape sequences are kept as-is. An empty line decodes to a
    single empty field.
    """
    fields: list[str] = []
    current: list[str] = []
    escaped = False
    for char in line:
        if escaped:
            escaped = False
            if char == delimiter:
                current.append(delimiter)
            else:
                current.append(_DECODE.get(char, ESCAPE + char))
        elif char == ESCAPE:
            escaped = True
        elif char == delimiter:
            fields.append("".join(current))
            current = []
        else:
            current.append(char)
    if escaped:
        current.append(ESCAPE)
    fields.append("".join(current))
    return fields
