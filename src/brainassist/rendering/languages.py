"""Code language detection for unlabeled fenced blocks.

This is a heuristic, not a parser: rules are checked top to bottom and
the first match wins, so code mixing idioms (a shell script calling
``print(`` for instance) may be misclassified. Unmatched code gets the
empty tag.
"""

import json
import re
from collections.abc import Callable

LanguageRule = tuple[Callable[[str], bool], str]


def _is_markup(code: str) -> bool:
    return code.startswith("<") and ("</" in code or "/>" in code or "<!DOCTYPE" in code)


def _is_python(code: str) -> bool:
    return bool(
        re.match(r"def\s+", code)
        or re.match(r"import\s+", code)
        or (re.search(r"print\s*\(", code) and ";" not in code)
    )


def _is_tsx(code: str) -> bool:
    return bool(
        "import React" in code
        or re.search(r"export\s+default\s+function", code)
        or "className=" in code
        or re.search(r"<\w+>", code)
    )


def _is_typescript(code: str) -> bool:
    return bool(
        re.search(r"(const|let|var|function)\s+", code)
        or "console.log(" in code
        or "=>" in code
    )


def _is_css(code: str) -> bool:
    return (
        all(token in code for token in ("{", "}", ":", ";"))
        and any(unit in code for unit in ("px", "rem", "@media"))
    )


def _is_sql(code: str) -> bool:
    return bool(re.search(r"SELECT\s+.+\s+FROM\s+", code, re.IGNORECASE))


def _is_cpp(code: str) -> bool:
    return "#include" in code and ("<stdio.h>" in code or "<iostream>" in code)


def _is_java(code: str) -> bool:
    return "public class" in code and "static void main" in code


def _is_json(code: str) -> bool:
    if not ((code.startswith("{") and code.endswith("}")) or (code.startswith("[") and code.endswith("]"))):
        return False
    try:
        json.loads(code)
    except ValueError:
        return False
    return True


def _is_shell(code: str) -> bool:
    return code.startswith("#!/bin/bash") or any(
        marker in code for marker in ("echo ", "sudo ", "npm install", "pip install")
    )


LANGUAGE_RULES: list[LanguageRule] = [
    (_is_markup, "html"),
    (_is_python, "python"),
    (_is_tsx, "tsx"),
    (_is_typescript, "typescript"),
    (_is_css, "css"),
    (_is_sql, "sql"),
    (_is_cpp, "cpp"),
    (_is_java, "java"),
    (_is_json, "json"),
    (_is_shell, "bash"),
]


def detect_language(code: str) -> str:
    """Guess the language of a code snippet.

    Args:
        code: Raw code, surrounding whitespace is ignored

    Returns:
        Language tag, or "" when no rule matches
    """
    code = code.strip()
    if not code:
        return ""
    for predicate, tag in LANGUAGE_RULES:
        if predicate(code):
            return tag
    return ""
