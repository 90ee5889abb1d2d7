"""DownloadGate — holds the archive download until an external unlock."""

from __future__ import annotations

from collections.abc import Callable

from PyQt6.QtCore import QObject, pyqtSignal

from layermint.config.constants import AUTHORIZATION_MESSAGE


class DownloadGate(QObject):
    """Runs a download action only once the gate has been unlocked.

    The payment collaborator listens to ``authorization_required`` and calls
    :meth:`unlock` when it confirms payment; a pending action then runs
    immediately. :meth:`reset` drops a pending action (the user declined).

    Signals
    -------
    authorization_required(str)
        Emitted with a prompt when a request arrives while locked.
    unlocked_changed(bool)
    """

    authorization_required = pyqtSignal(str)
    unlocked_changed = pyqtSignal(bool)

    def __init__(
        self, message: str = AUTHORIZATION_MESSAGE, parent: QObject | None = None
    ) -> None:
        super().__init__(parent)
        self._message = message
        self._unlocked = False
        self._pending: Callable[[], object] | None = None

    @property
    def unlocked(self) -> bool:
        return self._unlocked

    @property
    def has_pending(self) -> bool:
        return self._pending is not None

    def request(self, action: Callable[[], object]) -> bool:
        """Run *action* now if unlocked, else park it. Returns True if it ran."""
        if self._unlocked:
            action()
            return True
        self._pending = action
        self.authorization_required.emit(self._message)
        return False

    def unlock(self) -> None:
        if not self._unlocked:
            self._unlocked = True
            self.unlocked_changed.emit(True)
        pending, self._pending = self._pending, None
        if pending is not None:
            pending()

    def lock(self) -> None:
        if self._unlocked:
            self._unlocked = False
            self.unlocked_changed.emit(False)

    def reset(self) -> None:
        self._pending = None
