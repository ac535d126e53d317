"""
Purpose
-------
Typed failures raised when an H.4.1 document cannot be obtained.

Key behaviors
-------------
- `NoReleaseForDate`: the index page confirms no edition exists for the
  date. Not retryable; the caller should pick another date.
- `FetchBlockedOrUnexpectedHtml`: the server answered but with something
  other than a release (interstitial, consent page, bot block) or the
  network failed. Safe to retry later.
- `HttpError`: a hard non-2xx status on the first attempt. Only 5xx are
  worth retrying.
- `AnchorNotEstablished`: release discovery has no reference date.

Conventions
-----------
- Every error carries the URL involved (or None) and a short `code`
  string suitable for logs and API payloads.
"""


class H41FetchError(Exception):
    """
    Base class for fetch-class failures.

    Parameters
    ----------
    message : str
        Human-readable description.
    url : str, optional
        URL being fetched when the failure happened.
    """

    code: str = "FETCH_ERROR"

    def __init__(self, message: str, url: str | None = None) -> None:
        super().__init__(message)
        self.url = url


class NoReleaseForDate(H41FetchError):
    code = "NO_RELEASE_FOR_DATE"

    def __init__(self, date_iso: str, url: str | None = None) -> None:
        super().__init__(f"No H.4.1 release is listed for {date_iso}", url)
        self.date_iso = date_iso


class FetchBlockedOrUnexpectedHtml(H41FetchError):
    code = "FETCH_BLOCKED_OR_UNEXPECTED_HTML"


class HttpError(H41FetchError):
    """
    Hard HTTP failure.

    Attributes
    ----------
    status : int or None
        HTTP status code returned by the server.
    """

    def __init__(self, status: int | None, url: str | None = None) -> None:
        super().__init__(f"HTTP error {status} while fetching {url}", url)
        self.status = status
        self.code = f"HTTP_ERROR_{status}"

    @property
    def retryable(self) -> bool:
        return self.status is not None and self.status >= 500


class AnchorNotEstablished(H41FetchError):
    code = "ANCHOR_NOT_ESTABLISHED"
