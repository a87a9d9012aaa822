from textual.message import Message


class QuitRequestedMessage(Message):
    """
    broadcasted when the app is about to quit
    """

    bubble = True


class UserLogoutMessage(Message):
    """
    broadcasted when the user logs out
    """

    bubble = True


class UserLoginMessage(Message):
    """
    Fired after login or registration, so screens can re-read the session
    """

    bubble = True


class CartChangedMessage(Message):
    """
    Fired whenever a line is added, updated or removed, or the cart is emptied.
    Screens showing a cart count re-read the cart store.

    If posted from outside CartScreen, make sure to post at App level
    """

    bubble = True


class FavoritesChangedMessage(Message):
    """
    Fired when a product is favorited or unfavorited
    """

    bubble = True


class NewOrderMessage(Message):
    """
    Fired when an order is placed or history is cleared.
    Listened to by the orders screen
    """

    bubble = True


class ModeSwitchedMessage(Message):
    """
    fired whenever switch_mode is called
    must be fired from app level
    """

    bubble = True

    def __init__(self, old_mode: str, new_mode: str) -> None:
        super().__init__()
        self.old_mode = old_mode
        self.new_mode = new_mode
