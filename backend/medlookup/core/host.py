from typing import List, Optional, Protocol

NO_INDICATIONS = "—"


class DocumentHost(Protocol):
    """The editor the add-in runs in (Word): read and replace the current selection."""

    async def read_selection_text(self) -> str: ...

    async def replace_selection(self, text: str) -> None: ...


class StatusSink(Protocol):
    def set_status(self, message: str) -> None: ...

    def set_indications(self, message: Optional[str]) -> None: ...


class SelectionBuffer:
    """
    In-memory DocumentHost used by the HTTP API: the caller sends the selected
    text and gets back what the add-in should write over it.
    """

    def __init__(self, selection: str):
        self.selection = selection
        self.replaced: Optional[str] = None

    async def read_selection_text(self) -> str:
        # Word selections often carry a trailing paragraph mark / NBSP
        return (self.selection or "").strip()

    async def replace_selection(self, text: str) -> None:
        self.replaced = text


class StatusLog:
    """StatusSink that remembers every status line (latest last)."""

    def __init__(self):
        self.history: List[str] = []
        self.indications: str = NO_INDICATIONS

    @property
    def status(self) -> str:
        return self.history[-1] if self.history else ""

    def set_status(self, message: str) -> None:
        self.history.append(message or "")

    def set_indications(self, message: Optional[str]) -> None:
        self.indications = message.strip() if message and message.strip() else NO_INDICATIONS
