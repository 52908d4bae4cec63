"""Favorite flags overlaid onto derived meal views."""

from dataclasses import dataclass, field
from typing import Protocol
from uuid import UUID

from energy_balance.services.changes import ChangeNotifier, Topic


class FavoriteStore(Protocol):
    """Storage interface for per-profile favorite entry ids."""

    def favorites(self, profile_id: UUID) -> frozenset[UUID]:
        """Return the favorite entry ids for a profile."""

    def is_favorite(self, profile_id: UUID, entry_id: UUID) -> bool:
        """Return True when the entry is a favorite."""

    def set_favorite(self, profile_id: UUID, entry_id: UUID, value: bool) -> None:
        """Mark or unmark an entry as favorite."""

    def clear(self, profile_id: UUID) -> None:
        """Forget every favorite of a profile."""


@dataclass
class InMemoryFavoriteStore(FavoriteStore):
    """Process-lifetime favorite store; contents are lost on restart."""

    _entries: dict[UUID, set[UUID]] = field(default_factory=dict)

    def favorites(self, profile_id: UUID) -> frozenset[UUID]:
        """Return a snapshot of the profile's favorites."""
        return frozenset(self._entries.get(profile_id, ()))

    def is_favorite(self, profile_id: UUID, entry_id: UUID) -> bool:
        """Return True when the entry is flagged."""
        return entry_id in self._entries.get(profile_id, ())

    def set_favorite(self, profile_id: UUID, entry_id: UUID, value: bool) -> None:
        """Add or discard the entry."""
        entries = self._entries.setdefault(profile_id, set())
        if value:
            entries.add(entry_id)
        else:
            entries.discard(entry_id)
            if not entries:
                self._entries.pop(profile_id, None)

    def clear(self, profile_id: UUID) -> None:
        """Drop the profile's favorites."""
        self._entries.pop(profile_id, None)


@dataclass
class FavoritesService:
    """Toggles favorites and triggers one recomputation per toggle."""

    store: FavoriteStore
    notifier: ChangeNotifier

    def toggle(self, profile_id: UUID, entry_id: UUID) -> bool:
        """Flip an entry's favorite flag and return the new value."""
        value = not self.store.is_favorite(profile_id, entry_id)
        self.store.set_favorite(profile_id, entry_id, value)
        self.notifier.publish(profile_id, Topic.FAVORITES)
        return value

    def favorites(self, profile_id: UUID) -> frozenset[UUID]:
        """Return the profile's favorite entry ids."""
        return self.store.favorites(profile_id)
