"""Error kinds raised by tushare queries.

- TransportError: the request never got an HTTP response
- ServiceError: the service answered with a failure (non-zero code or HTTP status)
- ParseError: the service answered with a payload that is not a valid table
- UnknownParamError: a typed builder was given a parameter it does not declare
"""


class TushareError(Exception):
    """Base class for all tushare client errors."""


class TransportError(TushareError):
    """Network level failure reaching the service. Never retried."""

    def __init__(self, api_name: str, message: str):
        super().__init__(f"[{api_name}] transport error: {message}")
        self.api_name = api_name


class ServiceError(TushareError):
    """The service reported a non-success status.

    Attributes:
        api_name: Endpoint that was queried
        code: Remote status code (tushare ``code`` field or HTTP status)
        msg: Remote error message, verbatim
    """

    def __init__(self, api_name: str, code: int | None, msg: str):
        super().__init__(msg)
        self.api_name = api_name
        self.code = code
        self.msg = msg

    def __repr__(self) -> str:
        return f"ServiceError(api_name={self.api_name!r}, code={self.code!r}, msg={self.msg!r})"


class ParseError(TushareError):
    """The service succeeded but the payload could not be decoded into a table."""

    def __init__(self, api_name: str, message: str):
        super().__init__(f"[{api_name}] {message}")
        self.api_name = api_name


class UnknownParamError(TushareError, ValueError):
    def __init__(self, api_name: str, param: str):
        super().__init__(f"`{api_name}` does not accept parameter `{param}`")
        self.api_name = api_name
        self.param = param
