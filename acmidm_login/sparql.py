"""
Build SPARQL queries from escaped terms.

Values never go into query text directly. They are first converted into an
:class:`.Escaped` fragment with :func:`uri`, :func:`string` or
:func:`datetime_literal`, and :func:`prepare` refuses any other kind of
value. For example:

.. code-block:: python

   query = prepare('''
       SELECT ?account WHERE {
         GRAPH $graph { ?account dcterms:identifier $vo_id . }
       }''', 'dcterms', graph=uri(graph), vo_id=string(vo_id))

"""

import re
from datetime import datetime
from string import Template
from typing import Any, Optional

from pytz import UTC
from rdflib import Namespace
from rdflib.namespace import DCTERMS, FOAF, SKOS, XSD

from .exceptions import InvalidURI, UnsafeValue

MU = Namespace('http://mu.semte.ch/vocabularies/core/')
SESSION = Namespace('http://mu.semte.ch/vocabularies/session/')
ADMS = Namespace('http://www.w3.org/ns/adms#')
BESLUIT = Namespace('http://data.vlaanderen.be/ns/besluit#')

PREFIXES = {
    'mu': MU,
    'session': SESSION,
    'dcterms': DCTERMS,
    'foaf': FOAF,
    'adms': ADMS,
    'skos': SKOS,
    'besluit': BESLUIT,
}
"""Prefixes that can be declared by :func:`prepare`."""

# Characters excluded from IRIREF in the SPARQL grammar.
_IRI_FORBIDDEN = re.compile(r'[\x00-\x20<>"{}|^`\\]')

# ECHAR escapes. rdflib does not accept \' inside double quotes, and a single
# quote needs no escaping there.
_STRING_ESCAPES = str.maketrans({
    '\\': '\\\\',
    '"': '\\"',
    '\n': '\\n',
    '\r': '\\r',
    '\t': '\\t',
    '\b': '\\b',
    '\f': '\\f',
})
_CODEPOINT_AFTER_BACKSLASH = re.compile(r'\\\\([uU])')


class Escaped(str):
    """A query fragment that is safe to interpolate into query text."""


class EscapedURI(Escaped):
    """An IRI reference, including its angle brackets."""


class EscapedLiteral(Escaped):
    """A quoted (and possibly typed) RDF literal."""


def uri(value: Optional[str]) -> EscapedURI:
    """
    Escape a value for use as an IRI.

    Parameters
    ----------
    value : str

    Returns
    -------
    :class:`.EscapedURI`

    Raises
    ------
    :class:`.InvalidURI`
        If the value contains characters that may not appear in an IRI.

    """
    if value is None:
        raise InvalidURI('Expected an IRI, got None')
    value = str(value)
    if _IRI_FORBIDDEN.search(value):
        raise InvalidURI(f'Not a valid IRI: {value!r}')
    return EscapedURI(f'<{value}>')


def string(value: Any) -> EscapedLiteral:
    """
    Escape a value as a plain string literal.

    ``None`` becomes the empty string, other values are rendered with
    :func:`str`.
    """
    text = '' if value is None else str(value)
    escaped = text.translate(_STRING_ESCAPES)
    # \uXXXX sequences are expanded before the query is parsed, so an escaped
    # backslash must not be followed by a literal u or U.
    escaped = _CODEPOINT_AFTER_BACKSLASH.sub(
        lambda match: '\\\\\\U%08X' % ord(match.group(1)), escaped
    )
    return EscapedLiteral(f'"{escaped}"')


def datetime_literal(value: datetime) -> EscapedLiteral:
    """Escape a :class:`datetime` as an ``xsd:dateTime`` literal."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return EscapedLiteral(f'"{value.isoformat()}"^^<{XSD.dateTime}>')


def prefixes(*names: str) -> str:
    """Render ``PREFIX`` declarations for known prefix names."""
    return '\n'.join(f'PREFIX {name}: <{PREFIXES[name]}>' for name in names)


def prepare(template: str, *prefix_names: str, **terms: Escaped) -> str:
    """
    Render a query template.

    Parameters
    ----------
    template : str
        Query text with ``$name`` placeholders.
    prefix_names : str
        Names from :data:`PREFIXES` to declare ahead of the query.
    terms : :class:`.Escaped`
        Values for the placeholders.

    Returns
    -------
    str

    Raises
    ------
    :class:`.UnsafeValue`
        If any of the terms was not escaped.
    KeyError
        If a placeholder or prefix name is unknown.

    """
    for name, term in terms.items():
        if not isinstance(term, Escaped):
            raise UnsafeValue(f'Value for ${name} must be escaped, got '
                              f'{type(term).__name__}')
    body = Template(template).substitute(terms)
    if not prefix_names:
        return body
    return f'{prefixes(*prefix_names)}\n{body}'
