"""In-place terminal frame.

Hides how a frame replaces the previous one on a plain (non full-screen)
terminal: rich's Live display redraws its region instead of appending.
"""

from rich.console import Console
from rich.live import Live
from rich.text import Text


class LiveFrame:
    """FrameSink backed by rich.live.Live.

    The live region is started lazily on the first update and left on screen
    (not erased) when stopped, so the last notice stays visible.
    """

    def __init__(self, console: Console | None = None) -> None:
        self._console = console or Console()
        self._live: Live | None = None

    @property
    def console(self) -> Console:
        return self._console

    @property
    def active(self) -> bool:
        return self._live is not None

    def start(self) -> None:
        if self._live is None:
            self._live = Live(
                Text(""),
                console=self._console,
                auto_refresh=False,
                transient=False,
                redirect_stdout=False,
                redirect_stderr=False,
            )
            self._live.start()

    def update(self, frame: Text) -> None:
        self.start()
        assert self._live is not None
        self._live.update(frame, refresh=True)

    def clear(self) -> None:
        if self._live is not None:
            self._live.update(Text(""), refresh=True)

    def stop(self) -> None:
        if self._live is not None:
            self._live.stop()
            self._live = None

    def __enter__(self) -> "LiveFrame":
        self.start()
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.stop()
