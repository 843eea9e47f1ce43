"""Exactly-once ownership claims over a table of pooled records.

Container formats store face sets and vertex buffers in flat tables and let
each mesh refer to its entries by index. Loading moves every entry out of
the table into the mesh that names it; an index named twice, or never
present, means the document (or our understanding of it) is broken.
"""

from ..binary.bin_errors import FormatError


class ClaimPool:
    """Maps table index -> pending item; ``claim`` moves the item out.

    Args:
        items: table entries in on-disk order
        kind: human-readable entry name for error messages
    """

    __slots__ = ('kind', '_items')

    def __init__(self, items, kind="entry"):
        self.kind = kind
        self._items = dict(enumerate(items))

    def __len__(self):
        return len(self._items)

    def __contains__(self, index):
        return index in self._items

    def claim(self, index):
        try:
            return self._items.pop(index)
        except KeyError:
            raise FormatError(
                f"{self.kind.capitalize()} not found or already claimed: {index}",
                field=self.kind, observed=index,
            ) from None

    def claim_all(self, indices):
        return [self.claim(i) for i in indices]

    def remaining(self):
        return sorted(self._items)

    def ensure_empty(self):
        """Raise if any entry was never claimed by an owner."""
        if self._items:
            raise FormatError(
                f"Orphaned {self.kind}s found: {self.remaining()}",
                field=self.kind, observed=self.remaining(),
            )
