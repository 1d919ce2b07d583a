"""Aggregate stat stores and the change set used to write to them."""

from dataclasses import dataclass, field
from collections.abc import Hashable
from typing import Protocol

from statline.stats import Stat, empty_stat_line


class StatStore(Protocol):
    """Keyed counter port: anything the ledger writes aggregates into."""

    def increment(self, key: Hashable, stat: Stat, amount: int) -> None: ...

    def get(self, key: Hashable) -> dict[Stat, int]: ...


class StatTable:
    """In-memory StatStore holding one zero-initialized stat line per key."""

    def __init__(self, rows: dict | None = None):
        self._rows: dict[Hashable, dict[Stat, int]] = {}
        for key, row in (rows or {}).items():
            line = empty_stat_line()
            line.update(row)
            self._rows[key] = line

    def increment(self, key: Hashable, stat: Stat, amount: int) -> None:
        if not isinstance(stat, Stat):
            raise ValueError(f"Not a stat: {stat!r}")
        row = self._rows.setdefault(key, empty_stat_line())
        row[stat] += amount

    def get(self, key: Hashable) -> dict[Stat, int]:
        """Return a copy of the stat line for key (all zeros if never written)."""
        return dict(self._rows.get(key) or empty_stat_line())

    def value(self, key: Hashable, stat: Stat) -> int:
        return self._rows.get(key, {}).get(stat, 0)

    def reset(self, key: Hashable) -> None:
        self._rows[key] = empty_stat_line()

    def keys(self) -> list:
        return list(self._rows)

    def rows(self) -> dict[Hashable, dict[Stat, int]]:
        return {key: dict(row) for key, row in self._rows.items()}

    def __contains__(self, key: Hashable) -> bool:
        return key in self._rows

    def __len__(self) -> int:
        return len(self._rows)


@dataclass
class CareerStores:
    """All-time stores that outlive a single game."""

    players: StatTable = field(default_factory=StatTable)  # key: player id
    teams: StatTable = field(default_factory=StatTable)  # key: (team id, Team)
    lineups: StatTable = field(default_factory=StatTable)  # key: lineup id
    lineup_runs: dict[str, int] = field(default_factory=dict)  # key: lineup id


class ChangeSet:
    """
    Pending (store, key, stat, amount) writes, flushed as one unit.

    Every aggregate update goes through here, whether one play is recorded or
    a whole batch: entries are collected first, netted per (store, key, stat),
    then written store by store. If a store raises part way through, the
    writes already made are undone before the error propagates.
    """

    def __init__(self):
        self._entries: list[tuple[StatStore, Hashable, Stat, int]] = []

    def add(self, store: StatStore, key: Hashable, stat: Stat, amount: int) -> None:
        self._entries.append((store, key, stat, amount))

    def extend(self, other: "ChangeSet") -> None:
        self._entries.extend(other._entries)

    def entries(self) -> list[tuple[StatStore, Hashable, Stat, int]]:
        return list(self._entries)

    def net(self) -> list[tuple[StatStore, Hashable, Stat, int]]:
        """
        Collapse entries to one net amount per (store, key, stat).

        Stores are grouped in first-seen order and zero nets are dropped.

        Returns:
            List of (store, key, stat, amount) tuples
        """
        order: list[int] = []
        stores: dict[int, StatStore] = {}
        totals: dict[int, dict[tuple, int]] = {}

        for store, key, stat, amount in self._entries:
            sid = id(store)
            if sid not in stores:
                order.append(sid)
                stores[sid] = store
                totals[sid] = {}
            totals[sid][(key, stat)] = totals[sid].get((key, stat), 0) + amount

        return [
            (stores[sid], key, stat, amount)
            for sid in order
            for (key, stat), amount in totals[sid].items()
            if amount != 0
        ]

    def flush(self) -> int:
        """
        Write every pending entry, all or nothing.

        Returns:
            Number of counters written

        Raises:
            ValueError: If an entry's stat is not a Stat (nothing is written)
        """
        writes = self.net()
        for _, _, stat, _ in writes:
            if not isinstance(stat, Stat):
                raise ValueError(f"Not a stat: {stat!r}")

        applied = []
        try:
            for store, key, stat, amount in writes:
                store.increment(key, stat, amount)
                applied.append((store, key, stat, amount))
        except Exception:
            for store, key, stat, amount in reversed(applied):
                store.increment(key, stat, -amount)
            raise

        self._entries = []
        return len(applied)

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
