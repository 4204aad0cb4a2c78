"""
Exceptions raised by the URL pool.

Routes translate these into HTTP statuses:
- InvalidURLError -> 400
- StoreError -> 503
"""


class URLPoolError(Exception):
    """Base class for all URL pool errors"""


class InvalidURLError(URLPoolError):
    """Submitted body is not an http(s) URL"""

    def __init__(self, raw_url: str, reason: str):
        self.raw_url = raw_url
        self.reason = reason
        super().__init__(f"Invalid URL {raw_url!r}: {reason}")


class StoreError(URLPoolError):
    """A key-value store call failed"""


class CorruptCounterError(StoreError):
    """A counter key holds something that is not a non-negative integer"""

    def __init__(self, key: str, value: str):
        self.key = key
        self.value = value
        super().__init__(f"Counter key {key!r} holds non-integer value {value!r}")
