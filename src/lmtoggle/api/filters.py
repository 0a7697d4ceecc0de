"""Filter expression escaping for LogicMonitor list endpoints.

LogicMonitor list endpoints accept a ``filter`` query parameter written as
``field<op>"value"`` clauses joined by ``,`` (and) or ``|`` (or), e.g.::

    displayName~"Gi0/1",description!~"uplink"

The query string is sent as-is, so reserved characters inside a quoted
value (``/``, ``&``, ``#``, spaces, ``+``) have to be percent-encoded while
the operators, quotes, field names and combinators stay untouched.
"""
import re
from urllib.parse import quote

# Two-character operators precede their one-character suffixes.
_OPERATORS = ("!:", "!~", ">:", "<:", ":", ">", "<", "~")

_QUOTED_VALUE = re.compile(
    r'(?P<op>' + "|".join(re.escape(op) for op in _OPERATORS) + r')"(?P<value>[^"]*)"'
)

_PLAIN = re.compile(r"^[A-Za-z0-9\s]*$")

_PREFIX = "?filter="


def escape_filter(raw_filter: str) -> str:
    """Percent-encode the quoted literal values of a filter expression.

    Args:
        raw_filter: Filter in the LogicMonitor query grammar, optionally
            prefixed with a literal ``?filter=``

    Returns:
        The filter with each quoted value encoded independently. Strings
        with no quoted value after an operator pass through unchanged.

    Example:
        >>> escape_filter('description!~"uplink to core"')
        'description!~"uplink%20to%20core"'
    """
    if not raw_filter:
        return raw_filter

    expression = raw_filter
    if expression[: len(_PREFIX)].lower() == _PREFIX:
        expression = expression[len(_PREFIX):]

    if _PLAIN.match(expression):
        return expression

    return _QUOTED_VALUE.sub(
        lambda m: f'{m.group("op")}"{quote(m.group("value"), safe="")}"',
        expression,
    )
