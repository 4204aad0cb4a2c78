"""
Validation for submitted URLs.

The body of POST / is stored verbatim, so validation never rewrites it:
pydantic's AnyHttpUrl is used only to check that the text parses.
"""

from pydantic import AnyHttpUrl, TypeAdapter, ValidationError

from urlpool_app.exceptions import InvalidURLError

ALLOWED_SCHEMES = ("http://", "https://")

_http_url = TypeAdapter(AnyHttpUrl)


def validate_submitted_url(raw_url: str) -> str:
    """
    Check that raw_url is an absolute http(s) URL.

    Args:
        raw_url: Request body as received

    Returns:
        raw_url, unchanged

    Raises:
        InvalidURLError: scheme is not http/https or the URL does not parse
    """
    if not raw_url.startswith(ALLOWED_SCHEMES):
        raise InvalidURLError(raw_url, "scheme must be http:// or https://")

    try:
        _http_url.validate_python(raw_url)
    except ValidationError as e:
        raise InvalidURLError(raw_url, e.errors()[0]["msg"]) from None

    return raw_url
