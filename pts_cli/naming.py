"""Identifier case conversion for generated code.

Only ASCII letters change case. Characters that are not at a segment
boundary are copied verbatim, so ``myID`` stays ``MyID`` under pascal.
"""


def _upper(char: str) -> str:
    if "a" <= char <= "z":
        return chr(ord(char) - 32)
    return char


def _lower(char: str) -> str:
    if "A" <= char <= "Z":
        return chr(ord(char) + 32)
    return char


def pascal(name: str) -> str:
    """Convert ``user_name`` to ``UserName``.

    Underscores are dropped and the character following each one (and the
    first character) is upper-cased.
    """
    if not name:
        return ""
    chars = []
    next_upper = True
    for char in name:
        if char == "_":
            next_upper = True
            continue
        chars.append(_upper(char) if next_upper else char)
        next_upper = False
    return "".join(chars)


def camel(name: str) -> str:
    """Convert ``user_name`` to ``userName``."""
    if not name:
        return ""
    converted = pascal(name)
    if not converted:
        return ""
    return _lower(converted[0]) + converted[1:]


def underline(name: str) -> str:
    """Convert ``UserName`` to ``user_name``.

    Every upper-case letter after the first character gets a leading
    underscore, so ``HTTPServer`` becomes ``h_t_t_p_server``.
    """
    if not name:
        return ""
    chars = []
    for index, char in enumerate(name):
        if "A" <= char <= "Z":
            if index > 0:
                chars.append("_")
            chars.append(_lower(char))
        else:
            chars.append(char)
    return "".join(chars)
