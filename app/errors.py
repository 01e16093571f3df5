from typing import Optional


class PinServiceError(Exception):
    """Base class for errors that are rendered as a JSON error envelope."""

    status_code = 500

    def __init__(self, error: str, details: Optional[str] = None) -> None:
        super().__init__(error)
        self.error = error
        self.details = details

    def to_dict(self) -> dict:
        body = {"error": self.error}
        if self.details is not None:
            body["details"] = self.details
        return body


class ValidationError(PinServiceError):
    status_code = 400


class Unauthorized(PinServiceError):
    status_code = 401

    def __init__(self) -> None:
        super().__init__("Unauthorized")


class StoreFailure(PinServiceError):
    status_code = 500


class UpstreamError(PinServiceError):
    """The pin service or GitHub answered with something we cannot use."""

    def __init__(
        self,
        error: str,
        details: Optional[str] = None,
        status_code: int = 500,
        upstream_status: Optional[int] = None,
    ) -> None:
        super().__init__(error, details)
        self.status_code = status_code
        self.upstream_status = upstream_status

    def to_dict(self) -> dict:
        body = super().to_dict()
        if self.upstream_status is not None:
            body["status"] = self.upstream_status
        return body
