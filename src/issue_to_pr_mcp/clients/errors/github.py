ExtraInfoType = dict[str, str | None]


class ClientError(Exception):
    """A request error from the Issue-to-PR GitHub client."""

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        msg = message
        if extra_info:
            msg += " (" + ", ".join([f"{key}: {value}" for key, value in extra_info.items() if value is not None]) + ")"
        super().__init__(msg)


class RequestError(ClientError):
    """A non-successful response from the GitHub REST API.

    `response_body` holds the raw body text of the response so callers can surface GitHub's own diagnostic.
    """

    response_body: str
    status_code: int | None

    def __init__(self, action: str, response_body: str, status_code: int | None = None):
        self.response_body = response_body
        self.status_code = status_code
        super().__init__(
            message="A request error occured.",
            extra_info={"action": action, "status_code": str(status_code) if status_code is not None else None},
        )
