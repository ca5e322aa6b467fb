"""Recent-songs stage: author entities fan out into their newest songs."""

from typing import Any, List

from ..base import Stage
from ..entity import Entity
from ..options import AuthorSongsOptions, OptionsProvider


class RecentSongsStage(Stage):
    """
    Expands author entities into song entities.

    Output per song: the parent attributes, ``author_id`` set to the parent
    id and ``id`` replaced by the song id. Authors without songs vanish.
    """

    def __init__(self, store, options: Any = None):
        self._store = store
        self.options = OptionsProvider(options, AuthorSongsOptions.parse)

    @property
    def name(self) -> str:
        return "recent_songs"

    async def execute(self, entities: List[Entity]) -> List[Entity]:
        options = self.options.resolve()
        if not entities:
            return []

        author_ids = list(dict.fromkeys(entity.id for entity in entities))
        author_songs = await self._store.get_recent_by_author(author_ids, options)

        return [
            entity.merge({"author_id": entity.id, "id": song_id})
            for entity in entities
            for song_id in author_songs.get(entity.id) or []
        ]


def recent_songs(store, options: Any = None) -> RecentSongsStage:
    return RecentSongsStage(store, options)
