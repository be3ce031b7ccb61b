"""Session store binding — maps an opaque session to its cart id."""

from collections.abc import MutableMapping

SESSION_CART_KEY = "cart_id"


class SessionCartBinding:
    """get/set/clear of the cart id stored in a session mapping.

    The mapping is the Starlette ``request.session`` dict in the API and a
    plain dict in tests.
    """

    def __init__(self, session: MutableMapping):
        self._session = session

    def get(self) -> str | None:
        return self._session.get(SESSION_CART_KEY) or None

    def set(self, cart_id) -> None:
        self._session[SESSION_CART_KEY] = str(cart_id)

    def clear(self) -> None:
        self._session.pop(SESSION_CART_KEY, None)
