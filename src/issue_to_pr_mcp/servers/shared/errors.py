ExtraInfoType = dict[str, str | None]


class ServerError(Exception):
    """A request error from the Issue-to-PR server."""

    def __init__(self, message: str, extra_info: ExtraInfoType | None = None):
        msg = message
        if extra_info:
            msg += " (" + ", ".join([f"{key}: {value}" for key, value in extra_info.items() if value is not None]) + ")"
        super().__init__(msg)


class ConfigurationError(ServerError):
    """The server was started without the configuration it requires."""

    def __init__(self, missing: list[str]):
        super().__init__(message="Required configuration is missing.", extra_info={"missing": ", ".join(missing)})


class InvalidReferenceFormatError(ServerError):
    """An issue or pull request reference could not be parsed."""

    def __init__(self, kind: str, reference: str, accepted_formats: list[str]):
        super().__init__(
            message=f"Invalid {kind} URL format: {reference}. Expected format: {' or '.join(accepted_formats)}",
        )
