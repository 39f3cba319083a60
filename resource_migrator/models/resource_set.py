from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Optional


@dataclass
class ResourceSet:
    """An ordered sequence of distinct resource names, as produced by enumeration.

    Some listing endpoints return full definitions alongside the names (index templates);
    those are kept in `embedded` so they need not be fetched a second time.
    """
    names: List[str] = field(default_factory=list)
    embedded: Dict[str, dict] = field(default_factory=dict)

    def __post_init__(self):
        # Drop repeated names, keeping the first occurrence
        self.names = list(dict.fromkeys(self.names))

    def __len__(self) -> int:
        return len(self.names)

    def __iter__(self) -> Iterator[str]:
        return iter(self.names)

    def __contains__(self, name: str) -> bool:
        return name in self.names

    def embedded_definition(self, name: str) -> Optional[dict]:
        return self.embedded.get(name)

    def without(self, other: "ResourceSet") -> "ResourceSet":
        """Sequence difference: names of this set absent from `other`, in this set's order."""
        excluded = set(other.names)
        kept = [name for name in self.names if name not in excluded]
        return ResourceSet(kept, {n: d for n, d in self.embedded.items() if n in kept})

    def sorted(self) -> "ResourceSet":
        return ResourceSet(sorted(self.names), dict(self.embedded))


def make_batches(names: List[str], batch_size: Optional[int]) -> List[List[str]]:
    """Split `names` into contiguous slices of at most `batch_size`, preserving order.
    A missing or non-positive batch size yields a single batch.
    """
    if not names:
        return []
    if not batch_size or batch_size <= 0:
        return [list(names)]
    return [names[i:i + batch_size] for i in range(0, len(names), batch_size)]
