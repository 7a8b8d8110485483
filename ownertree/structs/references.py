import dataclasses
import urllib.parse
from typing import FrozenSet, Iterator, Mapping, NewType, Optional, Tuple

from ownertree import errors

# A name of a namespace, as distinct from other strings (e.g. object names).
NamespaceName = NewType('NamespaceName', str)

# `None` means the cluster-wide API calls, or the cluster-scoped resources.
Namespace = Optional[NamespaceName]


def parse_group_version(group_version: str) -> Tuple[str, str]:
    """
    Split an API's ``groupVersion`` string into its group & version.

    The core API has no group: ``"v1"`` is ``("", "v1")``.
    All other APIs have both: ``"apps/v1"`` is ``("apps", "v1")``.
    An empty string is an empty group-version: ``("", "")``.
    """
    if not group_version:
        return '', ''
    parts = group_version.split('/')
    if len(parts) == 1:
        return '', parts[0]
    elif len(parts) == 2:
        return parts[0], parts[1]
    else:
        raise errors.DiscoveryError(f"{group_version!r} cannot be parsed into a group & version.")


@dataclasses.dataclass(frozen=True, eq=False, repr=False)
class Resource:
    """
    An API resource as discovered on the server: ``plural.version.group``.

    Only the group, version & plural identify the resource and make the URLs;
    two resources with the same identity are equal regardless of other fields.
    The kind, singular & short names are used for lookups by the user input.
    The namespaced flag decides whether the namespace goes to the URLs.
    The verbs are as served by the API (e.g. ``list``), not as allowed by RBAC.
    """
    group: str  # "" for the core API
    version: str
    plural: str
    kind: Optional[str] = None
    singular: Optional[str] = None
    shortcuts: FrozenSet[str] = frozenset()
    namespaced: Optional[bool] = None
    verbs: FrozenSet[str] = frozenset()

    def __hash__(self) -> int:
        return hash(tuple(self))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Resource):
            return NotImplemented
        return tuple(self) == tuple(other)

    def __repr__(self) -> str:
        return self.qualified_name

    def __iter__(self) -> Iterator[str]:
        yield self.group
        yield self.version
        yield self.plural

    @property
    def qualified_name(self) -> str:
        """
        The catalog's key of the resource, e.g. ``deployments.v1.apps``.

        The core resources end with a dot as their group is empty: ``services.v1.``.
        """
        return f'{self.plural}.{self.version}.{self.group}'

    @property
    def api_version(self) -> str:
        """ The ``apiVersion`` of the objects: ``apps/v1``, or only ``v1`` for the core API. """
        return f'{self.group}/{self.version}' if self.group else self.version

    def get_url(
            self,
            *,
            server: Optional[str] = None,
            namespace: Namespace = None,
            name: Optional[str] = None,
            params: Optional[Mapping[str, str]] = None,
    ) -> str:
        """
        Build the URL of the resource's list, or of one object if the name is given.

        The list URL without a namespace is cluster-wide, also for namespaced resources.
        The URL is relative to the server unless the server is given.
        """
        if namespace is not None and not self.namespaced:
            raise ValueError(f"{self.qualified_name} is cluster-scoped and has no namespaces.")
        if namespace is None and name is not None and self.namespaced:
            raise ValueError(f"{self.qualified_name} is namespaced; objects need a namespace.")

        path = f'/apis/{self.group}/{self.version}' if self.group else f'/api/{self.version}'
        if namespace is not None:
            path += f'/namespaces/{namespace}'
        path += f'/{self.plural}'
        if name is not None:
            path += f'/{name}'
        if params:
            path += '?' + urllib.parse.urlencode(params, encoding='utf-8')
        return path if server is None else server.rstrip('/') + path

    def get_scope(self, namespace: Namespace) -> Namespace:
        """ The namespace to use in the API calls: none for cluster-scoped resources. """
        return namespace if self.namespaced else None
