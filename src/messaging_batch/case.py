"""
Key-case conversion for API payloads.
"""

import re
import typing as t

_SEPARATOR_PATTERN = re.compile(r"[_\-\s]+")
# Leading and trailing underscores mark private or meta keys and are kept as-is.
_AFFIX_PATTERN = re.compile(r"^(_*)(.*?)(_*)$", re.DOTALL)


def _split_words(value: str) -> list[str]:
    """
    Split a key into words at separators and case or digit boundaries.

    ``"HTMLParser"`` gives ``["HTML", "Parser"]`` and ``"has2fa"`` gives ``["has", "2fa"]``.
    """
    words: list[str] = []
    for chunk in _SEPARATOR_PATTERN.split(value):
        current = ""
        for char in chunk:
            if current:
                prev = current[-1]
                if char.isupper() and (prev.islower() or prev.isdigit()):
                    words.append(current)
                    current = ""
                elif char.isdigit() and prev.isalpha():
                    words.append(current)
                    current = ""
                elif char.islower() and prev.isupper() and current[-2:-1].isupper():
                    words.append(current[:-1])
                    current = prev
            current += char
        if current:
            words.append(current)
    return words


def _convert(value: str, join: t.Callable[[list[str]], str]) -> str:
    prefix, body, suffix = t.cast(re.Match[str], _AFFIX_PATTERN.match(value)).groups()
    words = _split_words(body)
    if not words:
        return value
    return prefix + join(words) + suffix


def snakecase(value: str) -> str:
    """
    Convert a key to snake_case.

    Parameters
    ----------
    value : str
        Key in any of camelCase, PascalCase or snake_case.

    Returns
    -------
    str
        Converted key, e.g. ``"myKey"`` -> ``"my_key"``, ``"has2fa"`` -> ``"has_2fa"``.
        Leading and trailing underscores are kept, so ``"__typename"`` is unchanged.
    """
    return _convert(value, lambda words: "_".join(word.lower() for word in words))


def camelcase(value: str) -> str:
    """
    Convert a key to camelCase, e.g. ``"my_key"`` -> ``"myKey"``.
    """
    return _convert(
        value,
        lambda words: words[0].lower() + "".join(word.capitalize() for word in words[1:]),
    )


def pascalcase(value: str) -> str:
    """
    Convert a key to PascalCase, e.g. ``"my_key"`` -> ``"MyKey"``.
    """
    return _convert(value, lambda words: "".join(word.capitalize() for word in words))


def _convert_keys(obj: t.Any, *, convert: t.Callable[[str], str], deep: bool) -> t.Any:
    if isinstance(obj, t.Mapping):
        return {
            (convert(key) if isinstance(key, str) else key): (
                _convert_keys(value, convert=convert, deep=deep) if deep else value
            )
            for key, value in obj.items()
        }
    if deep and isinstance(obj, list):
        return [_convert_keys(value, convert=convert, deep=deep) for value in obj]
    return obj


def snakecase_keys(obj: t.Any, deep: bool = False) -> t.Any:
    return _convert_keys(obj, convert=snakecase, deep=deep)


def snakecase_keys_deep(obj: t.Any) -> t.Any:
    return _convert_keys(obj, convert=snakecase, deep=True)


def camelcase_keys(obj: t.Any, deep: bool = False) -> t.Any:
    return _convert_keys(obj, convert=camelcase, deep=deep)


def camelcase_keys_deep(obj: t.Any) -> t.Any:
    return _convert_keys(obj, convert=camelcase, deep=True)


def pascalcase_keys(obj: t.Any, deep: bool = False) -> t.Any:
    return _convert_keys(obj, convert=pascalcase, deep=deep)


def pascalcase_keys_deep(obj: t.Any) -> t.Any:
    return _convert_keys(obj, convert=pascalcase, deep=True)
