"""
All the structures coming from the Kubernetes API.

The objects are treated generically: no per-kind structures are used.
Only the identity and the owner references are interpreted; everything else
is kept as an opaque document for informational purposes.

For strict type-checking, the raw payloads are detailed to the per-field
level (`TypedDict` instead of just ``Mapping[Any, Any]``) -- as used here.
Arbitrary other fields are present at runtime, but are not type-checked.
"""
import dataclasses
from typing import Any, List, Mapping, Optional, Tuple

from typing_extensions import TypedDict


class RawOwnerReference(TypedDict, total=False):
    apiVersion: str
    kind: str
    name: str
    uid: str
    controller: bool
    blockOwnerDeletion: bool


class RawMeta(TypedDict, total=False):
    uid: str
    name: str
    namespace: str
    ownerReferences: List[RawOwnerReference]
    resourceVersion: str
    creationTimestamp: str


class RawBody(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawMeta
    spec: Mapping[str, Any]
    status: Mapping[str, Any]


class RawListMeta(TypedDict, total=False):
    resourceVersion: str
    # "continue" is a keyword, so the field is not declared here; read it with `.get()`.


class RawList(TypedDict, total=False):
    apiVersion: str
    kind: str
    metadata: RawListMeta
    items: List[RawBody]


@dataclasses.dataclass(frozen=True)
class ObjectRecord:
    """
    An immutable snapshot of one object as retrieved from the cluster.

    The uid is unique across the whole cluster for the duration of a run.
    The owners are the uids of the owner references, in the declared order.
    """
    uid: str
    owners: Tuple[str, ...] = ()
    api_version: Optional[str] = None
    kind: Optional[str] = None
    name: Optional[str] = None
    namespace: Optional[str] = None
    body: Mapping[str, Any] = dataclasses.field(default_factory=dict, repr=False, compare=False)

    @classmethod
    def from_body(cls, body: RawBody) -> "ObjectRecord":
        meta = body.get('metadata', {})
        refs = meta.get('ownerReferences') or []
        return cls(
            uid=meta.get('uid', ''),
            owners=tuple(ref['uid'] for ref in refs if ref.get('uid')),
            api_version=body.get('apiVersion'),
            kind=body.get('kind'),
            name=meta.get('name'),
            namespace=meta.get('namespace'),
            body=body,
        )

    def __str__(self) -> str:
        return f'{self.kind or "?"}/{self.name or self.uid}'
