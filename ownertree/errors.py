"""
Errors of the ownership inspection, as seen by the callers.

The low-level errors of K8s API are in :mod:`ownertree.clients.errors`.
They never leak to the callers directly: every failure of discovery,
listing, or reading is wrapped into one of the errors below, with the
original API error chained as the cause -- for better explainability
of errors in the stack traces.

None of these errors is retried. A failed query is reported as such,
and is never mixed with a successful but empty result.
"""
from typing import TYPE_CHECKING, Collection, Optional

if TYPE_CHECKING:
    from ownertree.structs import references


class OwnerTreeError(Exception):
    """ A base class for all errors of the ownership inspection. """


class DiscoveryError(OwnerTreeError):
    """ Raised when the API resources cannot be discovered or interpreted. """


class KindNotFoundError(OwnerTreeError):
    """ Raised when the requested kind matches no discovered resource. """

    def __init__(self, kind: str) -> None:
        super().__init__(f"Could not find the API kind {kind!r}.")
        self.kind = kind


class AmbiguousKindError(OwnerTreeError):
    """ Raised when the requested kind matches more than one resource. """

    def __init__(self, kind: str, candidates: Collection[str]) -> None:
        names = ', '.join(candidates)
        super().__init__(f"Ambiguous kind {kind!r}. Use one of these as the KIND "
                         f"to disambiguate: [{names}]")
        self.kind = kind
        self.candidates = list(candidates)


class FetchError(OwnerTreeError):
    """ Raised when the objects of a resource cannot be listed or read. """

    def __init__(
            self,
            resource: "references.Resource",
            namespace: "references.Namespace",
            message: Optional[str] = None,
    ) -> None:
        where = f" in {namespace!r}" if namespace is not None else ""
        super().__init__(message or f"Listing {resource.qualified_name}{where} failed.")
        self.resource = resource
        self.namespace = namespace


class ObjectNotFoundError(OwnerTreeError):
    """ Raised when the requested root object does not exist in its scope. """

    def __init__(
            self,
            resource: "references.Resource",
            namespace: "references.Namespace",
            name: str,
    ) -> None:
        where = f" in {namespace!r}" if namespace is not None else ""
        super().__init__(f"Object {resource.qualified_name}/{name} is not found{where}.")
        self.resource = resource
        self.namespace = namespace
        self.name = name
