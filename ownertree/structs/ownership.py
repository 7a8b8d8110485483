"""
The ownership relations between the objects, as declared by the objects.

Every object can declare zero or more owners in ``metadata.ownerReferences``.
The directory inverts these references into an owner → dependents relation,
so that all dependents of an object can be found without rescanning.

The owners themselves are not required to be among the known objects:
an owner can be cluster-scoped, or in another namespace, or already deleted.
Such owners are present in the relation only as the uids of the parents.

.. seealso::
    https://kubernetes.io/docs/concepts/overview/working-with-objects/owners-dependents/
"""
from typing import Dict, Iterable, Iterator, Mapping, Optional, Set, Tuple

from ownertree.structs import bodies


class OwnershipDirectory:
    """
    The known objects by their uids, and the uids of dependents by their owners.

    It is built once from all the fetched objects and is never modified later.
    """

    _items: Dict[str, bodies.ObjectRecord]
    _ownership: Dict[str, Set[str]]

    def __init__(self) -> None:
        super().__init__()
        self._items = {}
        self._ownership = {}

    def __repr__(self) -> str:
        return f'<{self.__class__.__name__}: {len(self._items)} objects, {len(self._ownership)} owners>'

    def __len__(self) -> int:
        return len(self._items)

    def __contains__(self, uid: object) -> bool:
        return uid in self._items

    @classmethod
    def build(cls, records: Iterable[bodies.ObjectRecord]) -> "OwnershipDirectory":
        directory = cls()
        for record in records:
            directory._items[record.uid] = record
            for owner_uid in record.owners:
                directory._ownership.setdefault(owner_uid, set()).add(record.uid)
        return directory

    @property
    def items(self) -> Mapping[str, bodies.ObjectRecord]:
        return self._items

    @property
    def owners(self) -> Iterable[str]:
        return self._ownership.keys()

    def get(self, uid: str) -> Optional[bodies.ObjectRecord]:
        return self._items.get(uid)

    def children_of(self, uid: str) -> Set[str]:
        return set(self._ownership.get(uid, set()))

    def descendants(self, uid: str) -> Iterator[Tuple[int, str]]:
        """
        Walk all dependents of the object depth-first, with their depth.

        The dependents of the same owner are sorted by kind & name for stable
        output. Every object is yielded at most once, even if it is owned by
        several owners in the same subtree (or if the references are looped).
        """
        seen: Set[str] = {uid}
        stack = [(1, child) for child in reversed(self._sorted(self.children_of(uid)))]
        while stack:
            depth, child = stack.pop()
            if child in seen:
                continue
            seen.add(child)
            yield depth, child
            grandchildren = self._sorted(self.children_of(child) - seen)
            stack.extend((depth + 1, grandchild) for grandchild in reversed(grandchildren))

    def _sorted(self, uids: Iterable[str]) -> Tuple[str, ...]:
        def key(uid: str) -> Tuple[str, str, str]:
            record = self._items.get(uid)
            return (record.kind or '', record.name or '', uid) if record else ('', '', uid)
        return tuple(sorted(uids, key=key))


def children_of(directory: OwnershipDirectory, uid: str) -> Set[str]:
    return directory.children_of(uid)
