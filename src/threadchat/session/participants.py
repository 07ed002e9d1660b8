"""Participant name cache.

One cache is owned by the CLI for the life of the process and handed to
every session loop, so a sender seen in any thread (including the inbox
listing) resolves to a name in every other thread.

Single-writer rule: only the inbox step and the session loop's fetch
handling call upsert/absorb; the renderer only reads.
"""

from collections.abc import Iterable, Iterator

from ..gateway.models import Participant, Thread


class ParticipantCache:
    """Append-only mapping of participant id to Participant.

    The first metadata seen for an id is kept; entries are never evicted.
    """

    def __init__(self, participants: Iterable[Participant] = ()) -> None:
        self._entries: dict[str, Participant] = {}
        for participant in participants:
            self.upsert(participant.id, participant)

    def upsert(self, participant_id: str, participant: Participant) -> None:
        if participant_id not in self._entries:
            self._entries[participant_id] = participant

    def lookup(self, participant_id: str) -> Participant | None:
        return self._entries.get(participant_id)

    def absorb(self, thread: Thread) -> None:
        """Upsert every participant of a thread snapshot."""
        for participant_id, participant in thread.participants.items():
            self.upsert(participant_id, participant)

    def __contains__(self, participant_id: object) -> bool:
        return participant_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)
