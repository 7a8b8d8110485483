"""
A queryable index of all resources discovered in the cluster.

Every resource is registered under every name a user might type:
the singular, the plural, and the short names -- each one bare,
with the API group, and with the API version & group; e.g.
``deploy``, ``deploy.apps``, ``deploy.v1.apps``.

Different resources can share the same names (e.g. ``services`` in the core
API and in Knative). Such names are kept with all of their resources,
and it is up to the lookups to decide what to do with the ambiguity.
"""
import dataclasses
from typing import Dict, Iterable, Iterator, List, Mapping, Sequence

from typing_extensions import TypedDict

from ownertree.structs import references


class RawAPIResource(TypedDict, total=False):
    name: str
    singularName: str
    namespaced: bool
    kind: str
    verbs: List[str]
    shortNames: List[str]
    categories: List[str]


# https://kubernetes.io/docs/reference/generated/kubernetes-api/v1.19/#apiresourcelist-v1-meta
class RawAPIResourceList(TypedDict, total=False):
    kind: str
    groupVersion: str
    resources: List[RawAPIResource]


@dataclasses.dataclass(frozen=True)
class ResourceCatalog:
    resources: Sequence[references.Resource] = ()
    aliases: Mapping[str, Sequence[references.Resource]] = dataclasses.field(default_factory=dict)

    def __len__(self) -> int:
        return len(self.resources)

    def __iter__(self) -> Iterator[references.Resource]:
        return iter(self.resources)

    def lookup(self, name: str) -> Sequence[references.Resource]:
        return self.aliases.get(name.lower(), [])


def make_aliases(resource: references.Resource) -> List[str]:
    """
    Return all names that could refer to this resource, lower-cased.

    Note: builtins' singulars are empty in some clusters (reasons unknown):
    fall back to the lowercased kind, which is the same in all known cases.
    """
    singular = resource.singular or (resource.kind or '').lower()
    names = [singular, resource.plural] + sorted(resource.shortcuts)
    aliases: List[str] = []
    for name in names:
        if not name:
            continue
        aliases.extend([
            name,                                                    # e.g. deployment
            '.'.join([name, resource.group]),                        # e.g. deployment.apps
            '.'.join([name, resource.version, resource.group]),      # e.g. deployment.v1.apps
        ])
    # A short name can repeat the singular name; a resource is registered once per alias.
    return list(dict.fromkeys(alias.lower() for alias in aliases))


def make_resource(
        info: RawAPIResource,
        *,
        group: str,
        version: str,
) -> references.Resource:
    return references.Resource(
        group=group,
        version=version,
        plural=info['name'],
        kind=info.get('kind'),
        singular=info.get('singularName') or (info.get('kind') or '').lower() or None,
        shortcuts=frozenset(info.get('shortNames') or []),
        namespaced=info.get('namespaced'),
        verbs=frozenset(info.get('verbs') or []),
    )


def build_catalog(
        groups: Iterable[RawAPIResourceList],
) -> ResourceCatalog:
    """
    Index all listable resources of all given API group-versions.

    Non-listable resources (e.g. ``bindings``, ``tokenreviews``) are excluded
    entirely, as there is nothing to fetch from them anyway. Subresources
    (``pods/log``, ``deployments/scale``) are not the resources on their own.
    """
    resources: List[references.Resource] = []
    aliases: Dict[str, List[references.Resource]] = {}

    for group_dat in groups:
        group, version = references.parse_group_version(group_dat.get('groupVersion', ''))
        for info in group_dat.get('resources') or []:
            if '/' in info['name']:
                continue
            if 'list' not in (info.get('verbs') or []):
                continue
            resource = make_resource(info, group=group, version=version)
            for alias in make_aliases(resource):
                aliases.setdefault(alias, []).append(resource)
            resources.append(resource)

    return ResourceCatalog(resources=resources, aliases=aliases)
