from __future__ import annotations


class DurapiError(Exception):
    """Base exception for all durapi errors."""


class StatusError(DurapiError):
    """
    An error that carries an HTTP-style status code.

    The dispatcher converts any raised `StatusError` into a JSON error
    descriptor `{"status": ..., "error": ...}` using `status` as both the
    payload field and the transport status code. Other exceptions are
    reported with status 500.
    """

    def __init__(self, message: str, status: int = 500) -> None:
        super().__init__(message)
        self.status = status


class MethodNotFound(StatusError):
    """
    Raised by the dispatcher when the requested member is absent or not callable.
    """

    def __init__(self, method: str) -> None:
        super().__init__(f"Actor does not contain method {method}()", status=500)
        self.method = method


class DispatchError(StatusError):
    """
    Raised when an RPC request cannot be decoded into an argument list.
    """

    def __init__(self, message: str) -> None:
        super().__init__(message, status=400)


class RemoteCallError(DurapiError):
    """
    Raised on the client side when the remote actor answered with an error descriptor.

    Attributes
    ----------
    status:
        The status reported by the dispatcher (defaults to 500 server-side).
    """

    def __init__(self, message: str, status: int = 500) -> None:
        super().__init__(message)
        self.status = status

    # Never retried: the remote call reached the actor and failed there.
    transient = False


class TransportError(DurapiError):
    """
    A failure to deliver a request or to receive its response.

    Transports tag failures with `transient=True` or `transient=False` when
    they know which kind they are; the retry policy then uses the tag instead
    of inspecting the message. Untagged errors (`None`) are classified by
    their message.
    """

    def __init__(self, message: str, *, transient: bool | None = None) -> None:
        super().__init__(message)
        self.transient = transient


class ActorUnavailable(DurapiError):
    """
    Raised when delivering to an actor runtime that is not running.
    """
