"""
Resolving of the human-typed kinds into the specific resources.

The kinds are looked up in the discovered catalog by all their aliases.
Some aliases are known to be shared by several API groups in most clusters:
e.g., Knative registers its own ``services``, and older clusters still serve
``deployments`` in the ``extensions`` group. Asking the users every time
would be annoying, so the majority-case choices are hard-coded as overrides.

All other ambiguities are reported to the users as they are,
with the fully qualified names to choose from.
"""
import dataclasses
import logging
from typing import Iterable, Optional, Sequence

from ownertree import errors
from ownertree.structs import catalogs, references

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Override:
    """
    A preference of specific resources for the well-known ambiguous names.

    The preferences are the catalog aliases (usually fully qualified),
    tried in the listed order; the first one found in the catalog wins.
    """
    names: Iterable[str]
    preferences: Sequence[str]

    def __post_init__(self) -> None:
        # The kinds are matched case-insensitively, as typed by the users.
        object.__setattr__(self, 'names', frozenset(name.lower() for name in self.names))

    def __contains__(self, kind: object) -> bool:
        return isinstance(kind, str) and kind.lower() in self.names


OVERRIDES: Sequence[Override] = (

    # Knative also registers "Service"; prefer the core v1 Service.
    Override(
        names=frozenset({'svc', 'service', 'services'}),
        preferences=('service.v1.',),
    ),

    # Most clusters have Deployment in apps/v1, and older ones also in extensions/v1beta1.
    Override(
        names=frozenset({'deploy', 'deployment', 'deployments'}),
        preferences=('deployment.v1.apps', 'deployment.v1beta1.extensions'),
    ),
)


def find_override(
        kind: str,
        catalog: catalogs.ResourceCatalog,
        *,
        overrides: Iterable[Override] = OVERRIDES,
) -> Optional[references.Resource]:
    for override in overrides:
        if kind in override:
            for preference in override.preferences:
                found = catalog.lookup(preference)
                if found:
                    return found[0]
    return None


def resolve(
        kind: str,
        catalog: catalogs.ResourceCatalog,
        *,
        overrides: Iterable[Override] = OVERRIDES,
) -> references.Resource:
    """
    Resolve a human-typed kind into exactly one resource, or fail.

    The kind can be any alias of a resource: its singular or plural
    or short name, optionally qualified with the API version and/or group;
    e.g. ``deploy``, ``deployments.apps``, ``deployment.v1.apps``.
    The kind is case-insensitive.
    """
    resource = find_override(kind, catalog, overrides=overrides)
    if resource is not None:
        logger.debug(f"Kind {kind!r} is overridden as {resource.qualified_name}.")
        return resource

    found = catalog.lookup(kind)
    logger.debug(f"Kind {kind!r} matches: {list(found)!r}")
    if not found:
        raise errors.KindNotFoundError(kind)
    elif len(found) > 1:
        raise errors.AmbiguousKindError(kind, [candidate.qualified_name for candidate in found])
    else:
        return found[0]
