from textual.message import Message

from utils.state import SessionStatus


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    broadcasted when the user asks to log out
    """

    bubble = True


class NavigateMessage(Message):
    """
    Ask the app to show the view for `path` ("/admin/orders", "/login"...).
    The app runs the route gate and guard before switching.
    """

    bubble = True

    def __init__(self, path: str) -> None:
        super().__init__()
        self.path = path


class SessionChangedMessage(Message):
    """
    Posted by the app whenever the session store changes state.
    reason: bootstrap / login / register / logout / expired / refresh
    """

    bubble = True

    def __init__(self, status: SessionStatus, reason: str) -> None:
        super().__init__()
        self.status = status
        self.reason = reason
