"""Util functions for memorm: naming, inflection and json export."""
import io
import json
import re

import unidecode
from slugify import slugify

UNCOUNTABLE_WORDS = {
    "equipment",
    "information",
    "rice",
    "money",
    "species",
    "series",
    "fish",
    "sheep",
    "deer",
    "news",
}

IRREGULAR_PLURALS = {
    "person": "people",
    "man": "men",
    "woman": "women",
    "child": "children",
    "mouse": "mice",
    "goose": "geese",
    "tooth": "teeth",
    "foot": "feet",
    "ox": "oxen",
}

# first matching rule wins
PLURAL_RULES = tuple((re.compile(pattern), replacement) for (pattern, replacement) in (
    (r"sis$", "ses"),
    (r"(octop|vir)us$", r"\1i"),
    (r"(quiz)$", r"\1zes"),
    (r"(matr|vert|ind)(?:ix|ex)$", r"\1ices"),
    (r"([ti])um$", r"\1a"),
    (r"([^aeiouy]|qu)y$", r"\1ies"),
    (r"(?:([^f])fe|([lr])f)$", r"\1\2ves"),
    (r"(tomat|potat|her|ech)o$", r"\1oes"),
    (r"(x|ch|ss|sh|s|z)$", r"\1es"),
))

_acronym_boundary_pattern = re.compile(r"([A-Z]+)([A-Z][a-z])")
_camel_boundary_pattern = re.compile(r"([a-z0-9])([A-Z])")


def _pluralize_word(word):
    lower_word = word.lower()
    if lower_word in UNCOUNTABLE_WORDS:
        return word
    if lower_word in IRREGULAR_PLURALS:
        plural = IRREGULAR_PLURALS[lower_word]
        return plural.capitalize() if word[:1].isupper() else plural
    for pattern, replacement in PLURAL_RULES:
        if pattern.search(word):
            return pattern.sub(replacement, word, count=1)
    return word + "s"


def pluralize(word):
    """
    Get the plural form of an english word or of a snake case ref (only the last part is pluralized).

    Parameters
    ----------
    word: str

    Returns
    -------
    str

    Examples
    --------
    >>> pluralize("address")
    'addresses'
    >>> pluralize("blog_category")
    'blog_categories'
    >>> pluralize("person")
    'people'
    """
    if word == "":
        return word
    head, sep, last = word.rpartition("_")
    if last == "":
        return word
    return head + sep + _pluralize_word(last)


def name_to_ref(name):
    """
    Convert a type name to a ref, compatible with Python variable rules (so types can be reached with __getattr__).

    Conversion rule: name is made ASCII, camel case words are split, then all non alphanumeric characters are
    transformed to underscores and everything is lower cased.
    Example: 'BlogPost' -> 'blog_post'

    Parameters
    ----------
    name: str

    Returns
    -------
    str
    """
    ascii_name = unidecode.unidecode(name)
    ascii_name = _acronym_boundary_pattern.sub(r"\1_\2", ascii_name)
    ascii_name = _camel_boundary_pattern.sub(r"\1_\2", ascii_name)
    return slugify(ascii_name, separator="_")


def multi_mode_write(buffer_writer, string_writer, buffer_or_path=None):
    """
    Write to a buffer, to a file path, or return a string.

    Parameters
    ----------
    buffer_writer: callable
        takes a writable buffer as only argument
    string_writer: callable
        takes no argument and returns a string
    buffer_or_path: io.StringIO or str or None

    Returns
    -------
    str or None
        str if buffer_or_path is None else None
    """
    if buffer_or_path is None:
        return string_writer()

    if isinstance(buffer_or_path, str):
        with open(buffer_or_path, "w", encoding="utf-8") as f:
            buffer_writer(f)
        return None

    if isinstance(buffer_or_path, io.TextIOBase) or hasattr(buffer_or_path, "write"):
        buffer_writer(buffer_or_path)
        return None

    raise TypeError(f"buffer_or_path must be a path or a writable buffer, '{type(buffer_or_path)}' was given")


def json_data_to_json(json_data, buffer_or_path=None, indent=2):
    """
    Write a json-serializable dict to a string or file.

    Parameters
    ----------
    json_data: dict
    buffer_or_path: typing.StringIO or str or None
        buffer or file path to write the json to, if None (default) the function returns a json string
    indent: int or None
        indent parameter passed to json.dump

    Returns
    -------
    str or None
        str if buffer_or_path is None else None
    """
    return multi_mode_write(
        lambda buffer: json.dump(json_data, buffer, indent=indent),
        lambda: json.dumps(json_data, indent=indent),
        buffer_or_path=buffer_or_path
    )
