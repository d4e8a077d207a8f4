"""Naming helpers for labels and table/model guessing.

Only regular English inflection plus a short irregular list is covered;
that is enough for conventional snake_case table names.
"""

import re

__all__ = [
    'camel',
    'plural',
    'singular',
    'studly',
    'title',
]

_UNCOUNTABLE = frozenset({
    'data',
    'equipment',
    'feedback',
    'fish',
    'information',
    'media',
    'metadata',
    'money',
    'news',
    'rice',
    'series',
    'sheep',
    'species',
})

# First matching rule wins.
_PLURAL_RULES = [
    (r'(s)tatus$', r'\1tatuses'),
    (r'(quiz)$', r'\1zes'),
    (r'^(ox)$', r'\1en'),
    (r'([ml])ouse$', r'\1ice'),
    (r'(matr|vert|ind)(ix|ex)$', r'\1ices'),
    (r'(x|ch|ss|sh)$', r'\1es'),
    (r'([^aeiouy]|qu)y$', r'\1ies'),
    (r'(?:([^f])fe|([lr])f)$', r'\1\2ves'),
    (r'sis$', 'ses'),
    (r'([ti])um$', r'\1a'),
    (r'(p)erson$', r'\1eople'),
    (r'(m)an$', r'\1en'),
    (r'(c)hild$', r'\1hildren'),
    (r'(buffal|her|potat|tomat|volcan)o$', r'\1oes'),
    (r'(alias)$', r'\1es'),
    (r'us$', 'uses'),
    (r's$', 's'),
    (r'$', 's'),
]

_SINGULAR_RULES = [
    (r'(s)tatuses$', r'\1tatus'),
    (r'^(ox)en$', r'\1'),
    (r'([ml])ice$', r'\1ouse'),
    (r'(matr)ices$', r'\1ix'),
    (r'(vert|ind)ices$', r'\1ex'),
    (r'(alias)(es)?$', r'\1'),
    (r'(x|ch|ss|sh)es$', r'\1'),
    (r'(m)ovies$', r'\1ovie'),
    (r'([^aeiouy]|qu)ies$', r'\1y'),
    (r'([lr])ves$', r'\1f'),
    (r'([^f])ves$', r'\1fe'),
    (r'(analy|ba|diagno|parenthe|progno|synop|the)ses$', r'\1sis'),
    (r'([ti])a$', r'\1um'),
    (r'(p)eople$', r'\1erson'),
    (r'(m)en$', r'\1an'),
    (r'(c)hildren$', r'\1hild'),
    (r'(us)es$', r'\1'),
    (r'ss$', 'ss'),
    (r's$', ''),
]


def _inflect(word: str, rules) -> str:
    if not word or word.rsplit('_', 1)[-1].lower() in _UNCOUNTABLE:
        return word
    for pattern, replacement in rules:
        if re.search(pattern, word, flags=re.IGNORECASE):
            return re.sub(pattern, replacement, word, count=1, flags=re.IGNORECASE)
    return word


def plural(word: str) -> str:
    """Pluralize the last word of a snake_case name.

    Example:
        >>> plural("user_role")
        'user_roles'
        >>> plural("category")
        'categories'
        >>> plural("users")
        'users'
    """
    return _inflect(word, _PLURAL_RULES)


def singular(word: str) -> str:
    """Singularize the last word of a snake_case name.

    Example:
        >>> singular("categories")
        'category'
    """
    return _inflect(word, _SINGULAR_RULES)


def title(name: str) -> str:
    """Turn a field name into a label: ``first_name`` → ``First Name``."""
    return name.title().replace('_', ' ')


def studly(value: str) -> str:
    """Convert ``user_roles`` or ``user-roles`` to ``UserRoles``."""
    words = value.replace('-', ' ').replace('_', ' ').split(' ')
    return ''.join(w[:1].upper() + w[1:] for w in words)


def camel(value: str) -> str:
    """Convert ``user_roles`` to ``userRoles``."""
    s = studly(value)
    return s[:1].lower() + s[1:]
