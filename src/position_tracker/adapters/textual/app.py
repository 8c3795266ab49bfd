"""Executable Textual app for watching tracked ranges follow edits."""

from __future__ import annotations

import argparse
from typing import Optional, Sequence

try:  # pragma: no cover - imported only when demo is run
    from rich.text import Text
    from textual import events
    from textual.app import App, ComposeResult
    from textual.containers import Vertical
    from textual.widgets import Footer, Header, Static
except ModuleNotFoundError as exc:  # pragma: no cover - friendly error for missing dep
    raise RuntimeError(
        "Install the 'textual' extra to use position_tracker.adapters.textual.app"
    ) from exc

from position_tracker.host import Workspace
from position_tracker.runtime import telemetry

from .controller import TextualTrackingAdapter, TextualUIHooks, TrackingSnapshot

DEFAULT_TEXT = "1 22 333 4444 55555\n"


def render_snapshot(snapshot: TrackingSnapshot) -> Text:
    text = Text(snapshot.text + " ")
    for start, end in snapshot.ranges:
        text.stylize("reverse", start, max(end, start + 1))
    if snapshot.mark is not None:
        text.stylize("bold yellow", snapshot.mark, snapshot.mark + 1)
    text.stylize("underline", snapshot.cursor, snapshot.cursor + 1)
    return text


class TrackingDemoApp(App[None]):
    """Plain editor surface; tracked ranges render reversed."""

    CSS = """
	#buffer-view {
		height: 1fr;
		border: round $accent;
		padding: 1 1;
	}

	#status-line {
		height: 1;
		background: $surface-darken-1;
		padding: 0 1;
	}
	"""

    BINDINGS = [
        ("ctrl+q", "quit", "Quit"),
    ]

    def __init__(self, *, text: str = DEFAULT_TEXT) -> None:
        super().__init__()
        self._initial_text = text
        self.workspace = Workspace(name="demo")
        self.adapter: TextualTrackingAdapter | None = None
        self._buffer_widget: Static | None = None
        self._status_widget: Static | None = None

    def compose(self) -> ComposeResult:
        yield Header()
        with Vertical():
            self._buffer_widget = Static("", id="buffer-view")
            yield self._buffer_widget
        self._status_widget = Static("ctrl+t: mark / track range", id="status-line")
        yield self._status_widget
        yield Footer()

    def on_mount(self) -> None:
        document = self.workspace.open_document(self._initial_text, uri="demo://buffer")
        hooks = TextualUIHooks(
            update_buffer=self._update_buffer,
            update_status=self._update_status,
        )
        self.adapter = TextualTrackingAdapter(self.workspace, document, hooks)

    def on_unmount(self) -> None:
        if self.adapter:
            self.adapter.dispose()
            self.adapter = None
        self.workspace.dispose()

    def on_key(self, event: events.Key) -> None:
        if not self.adapter or event.key == "ctrl+q":
            return
        self.adapter.handle_textual_key(event.key, text=event.character)
        event.stop()

    def _update_buffer(self, snapshot: TrackingSnapshot) -> None:
        if self._buffer_widget:
            self._buffer_widget.update(render_snapshot(snapshot))

    def _update_status(self, status: str) -> None:
        if self._status_widget:
            self._status_widget.update(status)


def _parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the position tracking demo.")
    parser.add_argument(
        "--file",
        help="Load initial text from this file instead of the sample line",
    )
    parser.add_argument(
        "--log-level",
        help="Minimum telelog level, e.g. DEBUG (defaults to POSITION_TRACKER_LOG_LEVEL)",
    )
    return parser.parse_args(argv)


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = _parse_args(argv)
    if args.log_level:
        telemetry.configure(level=args.log_level)
    text = DEFAULT_TEXT
    if args.file:
        with open(args.file, encoding="utf-8") as handle:
            text = handle.read()
    TrackingDemoApp(text=text).run()


if __name__ == "__main__":  # pragma: no cover - manual demo
    main()
