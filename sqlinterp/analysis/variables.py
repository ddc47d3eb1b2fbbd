"""
Extraction of interpolated variable references from literal text.
"""

import re
from typing import List


VARIABLE_PATTERN = re.compile(
    r"""
    # Escaped sigils are not interpolated.
    (?<!\\)
    # Pairs of backslashes are literal backslashes.
    (?:\\\\)*
    (
        [$@]
        # Dereference, as in $$ref or @$ref.
        \$?
        (?:
            \{(?:\w+|::)\}     # ${name}
            |
            (?:\w|::)+         # name, including package separators
        )
        # Nested data structure access.
        (?:
            (?:->)?
            (?:
                \{['"]?\w+['"]?\}    # hash element
                |
                \[['"]?\w+['"]?\]    # array element
            )
        )*
    )
    """,
    re.VERBOSE,
)


def extract_variables(text: str) -> List[str]:
    """
    Extract the interpolated variable references from a string.

    Each reference is reported once, in order of first appearance. After
    every match all copies of the matched span are removed from the
    working text before searching again.

    >>> extract_variables("SELECT * FROM $table WHERE id = $table")
    ['$table']
    """
    variables: List[str] = []
    remaining = text

    while True:
        match = VARIABLE_PATTERN.search(remaining)
        if match is None:
            break
        variable = match.group(1)
        variables.append(variable)
        remaining = remaining.replace(variable, "")

    return variables
