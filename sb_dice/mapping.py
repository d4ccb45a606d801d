"""Mapping table from assigned index to original literal value.

The table is an append-only ledger: entry ``i`` always has index ``i``.
Serialized, it becomes the ``<base>_s.json`` mapping document.
"""

import json
import re
from collections.abc import Iterator
from dataclasses import dataclass

from sb_dice.errors import InvariantError, MappingDocumentError

_LONE_SURROGATE_RE = re.compile("[\ud800-\udfff]")


@dataclass(frozen=True)
class MappingEntry:
    """One assigned index and the literal value it replaced."""

    index: int
    value: str

    @property
    def key(self) -> str:
        return str(self.index)


class MappingTable:
    """Ordered, contiguous index -> original value ledger."""

    def __init__(self) -> None:
        self._entries: list[MappingEntry] = []
        self._frozen = False

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[MappingEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> str:
        return self._entries[index].value

    def __repr__(self) -> str:
        state = "frozen" if self._frozen else "open"
        return f"MappingTable({len(self._entries)} entries, {state})"

    @property
    def next_index(self) -> int:
        """The index the next insert must use."""
        return len(self._entries)

    @property
    def frozen(self) -> bool:
        return self._frozen

    def insert(self, index: int, value: str) -> MappingEntry:
        """Append an entry.

        Args:
            index: Must equal the current table length.
            value: Original literal value.

        Raises:
            InvariantError: If the index is out of sequence or the table is frozen.
        """
        if self._frozen:
            raise InvariantError(f"Mapping table is frozen; cannot insert index {index}")
        if index != len(self._entries):
            raise InvariantError(
                f"Mapping index out of sequence: expected {len(self._entries)}, got {index}"
            )
        entry = MappingEntry(index=index, value=value)
        self._entries.append(entry)
        return entry

    def freeze(self) -> "MappingTable":
        """Mark the table complete. Further inserts fail."""
        self._frozen = True
        return self

    def values(self) -> list[str]:
        return [entry.value for entry in self._entries]

    def to_dict(self) -> dict[str, str]:
        """Return ``{"0": value0, "1": value1, ...}`` in index order."""
        return {entry.key: entry.value for entry in self._entries}

    def serialize(self, indent: int | None = 2, ensure_ascii: bool = False) -> str:
        """Render the mapping document.

        Keys are the decimal indices in ascending order. Values holding an
        unpaired UTF-16 surrogate cannot be written as UTF-8, so the whole
        document falls back to ASCII escapes in that case.

        Args:
            indent: JSON indentation; None for a single compact line.
            ensure_ascii: Escape every non-ASCII character.

        Returns:
            JSON text of the mapping document.
        """
        if not ensure_ascii and any(_LONE_SURROGATE_RE.search(v) for v in self.values()):
            ensure_ascii = True
        separators = (",", ":") if indent is None else (",", ": ")
        return json.dumps(
            self.to_dict(),
            indent=indent,
            ensure_ascii=ensure_ascii,
            separators=separators,
        )

    @classmethod
    def from_document(cls, text: str) -> "MappingTable":
        """Load and validate a mapping document.

        Args:
            text: JSON text as produced by ``serialize``.

        Returns:
            A frozen MappingTable.

        Raises:
            MappingDocumentError: If the document is not a JSON object of
                strings keyed ``"0"`` to ``"N-1"``.
        """
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            raise MappingDocumentError(f"Mapping document is not valid JSON: {e}") from e

        if not isinstance(data, dict):
            raise MappingDocumentError("Mapping document must be a JSON object")

        table = cls()
        for expected, (key, value) in enumerate(data.items()):
            if key != str(expected):
                raise MappingDocumentError(
                    f"Mapping keys must run 0..{len(data) - 1} in order; "
                    f"found {key!r} at position {expected}"
                )
            if not isinstance(value, str):
                raise MappingDocumentError(f"Mapping value for key {key!r} is not a string")
            table.insert(expected, value)
        return table.freeze()
