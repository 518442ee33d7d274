from __future__ import annotations

import json
from typing import Any, List


def strip_json_extensions(text: str) -> str:
    """Remove ``//`` and ``/* */`` comments and trailing commas outside strings.

    The result is plain JSON text; string literals are copied untouched.
    """
    out: List[str] = []
    i = 0
    n = len(text)
    in_string = False
    while i < n:
        ch = text[i]
        if in_string:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(text[i + 1])
                i += 2
                continue
            if ch == '"':
                in_string = False
            i += 1
            continue

        if ch == '"':
            in_string = True
            out.append(ch)
            i += 1
        elif text.startswith("//", i):
            j = text.find("\n", i)
            i = n if j == -1 else j
        elif text.startswith("/*", i):
            j = text.find("*/", i + 2)
            if j == -1:
                raise json.JSONDecodeError("Unterminated comment", text, i)
            i = j + 2
        elif ch == ",":
            # drop the comma when the next significant char closes a container
            k = _skip_insignificant(text, i + 1)
            if k < n and text[k] in "]}":
                i += 1
            else:
                out.append(ch)
                i += 1
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _skip_insignificant(text: str, i: int) -> int:
    n = len(text)
    while i < n:
        if text[i].isspace():
            i += 1
        elif text.startswith("//", i):
            j = text.find("\n", i)
            i = n if j == -1 else j
        elif text.startswith("/*", i):
            j = text.find("*/", i + 2)
            i = n if j == -1 else j + 2
        else:
            break
    return i


def parse_json_text(text: str) -> Any:
    """Parse JSON that may contain comments and trailing commas.

    Raises:
        json.JSONDecodeError: if the text is not valid even after cleanup.
    """
    if text.startswith("\ufeff"):
        text = text[1:]
    return json.loads(strip_json_extensions(text))
