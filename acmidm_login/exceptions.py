"""Exceptions."""


class GraphStoreError(RuntimeError):
    """Failed to communicate with the graph store."""


class QueryFailed(GraphStoreError):
    """A read query against the graph store failed."""


class UpdateFailed(GraphStoreError):
    """An update against the graph store failed."""


class UnsafeValue(TypeError):
    """A value was interpolated into a query without being escaped."""


class InvalidURI(ValueError):
    """Value cannot be used as an IRI in a query."""
