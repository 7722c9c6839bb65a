import logging

logger = logging.getLogger(__name__)

_BOM = "\ufeff"


def tokenize_line(line: str) -> list[str]:
    """
    Split one CSV line into trimmed fields.
    - commas inside double quotes are not delimiters
    - inside quotes, "" emits one literal quote
    - quote characters that open/close a quoted section are not emitted
    - unbalanced quotes are tolerated (the rest of the line is one field)
    """
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False

    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == '"':
            if in_quotes and i + 1 < n and line[i + 1] == '"':
                current.append('"')  # escaped quote
                i += 2
                continue
            in_quotes = not in_quotes
        elif ch == "," and not in_quotes:
            fields.append("".join(current).strip())
            current = []
        else:
            current.append(ch)
        i += 1

    if in_quotes:
        logger.debug("Unbalanced quotes in line: %r", line[:120])

    fields.append("".join(current).strip())
    return fields


def strip_quote_artifacts(fields: list[str]) -> list[str]:
    """Drop any literal double quotes left in each field after tokenizing."""
    return [f.replace('"', "") for f in fields]


def split_lines(text: str) -> list[str]:
    """
    Split raw CSV text into lines, dropping blank/whitespace-only lines.
    A quoted field spanning a blank line is not supported.
    """
    lines = [line for line in text.split("\n") if line.strip()]
    if lines and lines[0].startswith(_BOM):
        lines[0] = lines[0][len(_BOM):]  # tolerate a byte-order mark on the header
    return lines


def read_table(text: str) -> tuple[list[str], list[list[str]]]:
    """
    Tokenize a whole CSV payload into (headers, rows).
    Both are quote-stripped; returns ([], []) for text with no usable lines.
    """
    lines = split_lines(text)
    if not lines:
        return [], []
    headers = strip_quote_artifacts(tokenize_line(lines[0]))
    rows = [strip_quote_artifacts(tokenize_line(line)) for line in lines[1:]]
    logger.debug("Read table: %d headers, %d data lines", len(headers), len(rows))
    return headers, rows
