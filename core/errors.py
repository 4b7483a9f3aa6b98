class FlipWiseError(Exception):
    """Base class for errors raised by the study core."""


class DuplicateUser(FlipWiseError):
    def __init__(self, username):
        super().__init__(f"Username already taken: {username!r}")
        self.username = username


class InvalidCredentials(FlipWiseError):
    """Unknown username or wrong password. The two cases are not told apart."""

    def __init__(self):
        super().__init__("Invalid username or password")


class NotLoggedIn(FlipWiseError):
    def __init__(self):
        super().__init__("No user is logged in on this device")


class DeserializationFailure(FlipWiseError):
    """Stored games could not be decoded. Callers fall back to an empty deck."""
