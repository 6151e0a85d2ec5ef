"""Readable test titles from code identifiers.

`decamelize` splits camel-cased identifiers while keeping acronyms together
(`dataForUSACounties` -> `data_for_USA_counties`); `humanize` turns the
result into a display title (`shouldReturnTrue` -> `Return True`).
"""

from __future__ import annotations

import re

SEPARATOR = "_"

_SEPARATED_CHAR = re.compile(r"_.")
_WORD_START = re.compile(r"^(.)|\s(.)")
_ARTICLE_A = re.compile(r"\sA\s")
_ARTICLE_THE = re.compile(r"\sThe\s")
_LEADING_TEST = re.compile(r"^Test\s")
_LEADING_SHOULD = re.compile(r"^Should\s")


def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"


def _is_upper_or_digit(char: str) -> bool:
    return char.isupper() or _is_digit(char)


def _split_lower_upper(text: str, separator: str) -> str:
    # `dataForUSACounties` -> `data_For_USACounties`
    result: list[str] = []
    for i, char in enumerate(text):
        result.append(char)
        if i + 1 < len(text) and (char.islower() or _is_digit(char)) and text[i + 1].isupper():
            result.append(separator)
    return "".join(result)


def _lower_isolated_upper(text: str) -> str:
    # `data_For_USACounties` -> `data_for_USACounties`
    result: list[str] = []
    for i, char in enumerate(text):
        before = text[i - 1] if i > 0 else ""
        after = text[i + 1] if i + 1 < len(text) else ""
        isolated = (
            _is_upper_or_digit(char)
            and not (before and _is_upper_or_digit(before))
            and not (after and _is_upper_or_digit(after))
        )
        result.append(char.lower() if isolated else char)
    return "".join(result)


def _split_upper_runs(text: str, separator: str) -> str:
    # `data_for_USACounties` -> `data_for_USA_counties`
    result: list[str] = []
    i = 0
    while i < len(text):
        if not text[i].isupper():
            result.append(text[i])
            i += 1
            continue

        run_end = i
        while run_end < len(text) and text[run_end].isupper():
            run_end += 1

        if run_end - i >= 2 and run_end < len(text) and text[run_end].islower():
            word_end = run_end
            while word_end < len(text) and text[word_end].islower():
                word_end += 1
            result.append(text[i : run_end - 1])
            result.append(separator)
            result.append(text[run_end - 1 : word_end].lower())
            i = word_end
        else:
            result.append(text[i:run_end])
            i = run_end
    return "".join(result)


def decamelize(text: str, separator: str = SEPARATOR) -> str:
    """Convert a camel-cased identifier into separator-delimited words.

    Single uppercase letters are lowercased while uppercase sequences
    (acronyms) are preserved and split from the following word.

    Args:
        text: Identifier to convert
        separator: Delimiter inserted between words

    Returns:
        Decamelized identifier
    """
    decamelized = _split_lower_upper(text, separator)
    decamelized = _lower_isolated_upper(decamelized)
    return _split_upper_runs(decamelized, separator)


def humanize(text: str) -> str:
    """Turn a code identifier into a readable test title.

    Args:
        text: Identifier such as a test method name

    Returns:
        Capitalized phrase without a leading "Test"/"Should" word
    """
    text = decamelize(text)
    text = _SEPARATED_CHAR.sub(lambda m: f" {m.group(0)[1].upper()}", text).strip()
    text = _WORD_START.sub(lambda m: m.group(0).upper(), text).strip()
    text = _ARTICLE_A.sub(" a ", text)
    text = _ARTICLE_THE.sub(" the ", text)
    text = _LEADING_TEST.sub("", text)
    return _LEADING_SHOULD.sub("", text)
