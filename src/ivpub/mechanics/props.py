"""Tokenizer for key=value statement attributes in mechanics blocks"""

import re
from dataclasses import dataclass, field


Value = str | int | float

# Scanned left to right; characters matching no alternative (keywords, braces) are skipped.
_TOKEN_RE = re.compile(
    r'''
    (?<![\w-])(?P<key>[\w][\w-]*)=
        (?:
            "(?P<quoted>[^"]*)"
          | (?P<number>-?\d+(?:\.\d+)?)(?![^\s}])
          | (?P<bare>[^\s"{}]+)
        )
    | "(?P<arg>[^"]*)"
    | (?<![\w.-])(?P<argnum>-?\d+(?:\.\d+)?)(?![^\s}])
    ''',
    re.VERBOSE,
)
_NUMBER_RE = re.compile(r'-?\d+(?:\.\d+)?')


def to_number(text: str) -> int | float:
    """Parse an already-validated numeric literal, keeping integers integral."""
    return float(text) if '.' in text else int(text)


def coerce_number(value, default: int | float = 0) -> int | float:
    """Numeric form of a prop value; default when absent or unparsable."""
    if isinstance(value, bool):
        return default
    if isinstance(value, (int, float)):
        return value
    if isinstance(value, str) and _NUMBER_RE.fullmatch(value.strip()):
        return to_number(value.strip())
    return default


@dataclass
class Props:
    """Attributes of one statement line.

    values: key -> str | int | float; on repeated keys the last occurrence wins.
    args:   positional quoted strings and bare numbers, in source order.
    """
    values: dict[str, Value] = field(default_factory=dict)
    args:   list[Value] = field(default_factory=list)

    def has(self, key: str) -> bool:
        return key in self.values

    def get(self, key: str, default=None):
        return self.values.get(key, default)

    def text(self, *keys: str, default: str = '') -> str:
        """String form of the first present key."""
        for key in keys:
            if key in self.values:
                return str(self.values[key])
        return default

    def number(self, *keys: str, default: int | float = 0) -> int | float:
        """Numeric form of the first present key; default when absent or not numeric."""
        for key in keys:
            if key in self.values:
                return coerce_number(self.values[key], default)
        return default

    def first_text_arg(self) -> str | None:
        return next((a for a in self.args if isinstance(a, str)), None)


def parse_props(line: str) -> Props:
    """Tokenize key="quoted", key=number, key=bareword pairs and positional arguments."""
    props = Props()
    for m in _TOKEN_RE.finditer(line):
        if m.group('key'):
            if m.group('quoted') is not None:
                props.values[m.group('key')] = m.group('quoted')
            elif m.group('number') is not None:
                props.values[m.group('key')] = to_number(m.group('number'))
            else:
                props.values[m.group('key')] = m.group('bare')
        elif m.group('arg') is not None:
            props.args.append(m.group('arg'))
        else:
            props.args.append(to_number(m.group('argnum')))
    return props
