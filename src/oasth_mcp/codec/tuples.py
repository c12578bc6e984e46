"""Parser for the OASTH parenthesized tuple wire format.

The upstream service often answers with text such as:

    (1, "ΚΑΜΑΡΑ", None), (2, "ΒΕΝΙΖΕΛΟΥ", 40.63)

rather than JSON. Fields carry no names; position is the only addressing.
Tuples are never nested, so the first ')' closes a group.
"""

import re

TUPLE_PATTERN = re.compile(r"\(([^)]+)\)")

# quoted string | signed decimal | None/null sentinel
VALUE_PATTERN = re.compile(r'"([^"]*)"|-?\d+\.?\d*|None|null')

NULL_TOKENS = frozenset({"None", "null"})


def parse_tuple(content: str) -> list[str]:
    """Extract the fields of one group's inner text.

    Quoted strings lose their quotes (no escape processing), numbers are kept
    verbatim and None/null become empty strings. Anything else is a separator.
    """
    values: list[str] = []
    for match in VALUE_PATTERN.finditer(content):
        quoted = match.group(1)
        if quoted is not None:
            values.append(quoted)
        elif match.group(0) in NULL_TOKENS:
            values.append("")
        else:
            values.append(match.group(0))
    return values


def parse_tuples(text: str) -> list[list[str]]:
    """Parse tuple-format text into rows of string fields.

    Args:
        text: Response body text.

    Returns:
        Rows in input order. Groups without any recognisable token are dropped.
    """
    rows: list[list[str]] = []
    for match in TUPLE_PATTERN.finditer(text):
        values = parse_tuple(match.group(1))
        if values:
            rows.append(values)
    return rows
