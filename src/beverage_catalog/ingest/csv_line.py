"""
Delimited line parser

Splits one line of delimiter-separated text into trimmed fields.
"""


def parse_csv_line(line: str, delimiter: str = ",", quote: str = '"') -> list[str]:
    """
    Split one line into fields

    A quote toggles the quoted state; a doubled quote inside a quoted span is
    a literal quote. Delimiters inside quotes are literal text. Never raises:
    an unterminated quote just runs to the end of the line.
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    length = len(line)

    while i < length:
        char = line[i]
        if char == quote:
            if in_quotes and i + 1 < length and line[i + 1] == quote:
                current.append(quote)
                i += 1
            else:
                in_quotes = not in_quotes
        elif char == delimiter and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(char)
        i += 1

    fields.append("".join(current).strip())
    return fields
