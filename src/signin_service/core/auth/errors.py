"""Authentication errors.

Every failure of the authentication core is raised as an AuthError subclass.
The HTTP layer translates them into responses using ``status_code``.
"""


class AuthError(Exception):
    """Base class for authentication failures."""

    status_code = 400

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class UserNotFound(AuthError):
    """No user record matches the lookup."""

    status_code = 401


class InvalidCredentials(AuthError):
    """The submitted password does not match the stored credential."""

    status_code = 401


class EmailAlreadyRegistered(AuthError):
    """A local registration used an email that already has an account."""

    status_code = 409


class ProviderError(AuthError):
    """Federated provider handshake failed."""

    status_code = 502


class StoreError(AuthError):
    """The user-record or session store is unavailable."""

    status_code = 503
