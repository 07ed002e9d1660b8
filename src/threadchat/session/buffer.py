"""The in-progress reply.

Characters are kept as a list, one entry per keystroke, so deleting the last
keystroke never splits a multi-byte character.
"""


class InputBuffer:
    """Ordered sequence of single characters not yet sent.

    No operation fails and none has side effects beyond the buffer itself;
    callers are responsible for re-rendering.
    """

    def __init__(self) -> None:
        self._chars: list[str] = []

    def append(self, char: str) -> None:
        self._chars.append(char)

    def delete_last(self) -> None:
        """Remove the last character; no-op when empty."""
        if self._chars:
            self._chars.pop()

    def clear(self) -> None:
        self._chars.clear()

    def to_text(self) -> str:
        return "".join(self._chars)

    def __len__(self) -> int:
        return len(self._chars)

    def __bool__(self) -> bool:
        return bool(self._chars)

    def __repr__(self) -> str:
        return f"InputBuffer({self.to_text()!r})"
