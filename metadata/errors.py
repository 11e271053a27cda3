from __future__ import annotations


class MediaSearchError(Exception):
    pass


class NotRegistered(MediaSearchError, LookupError):
    def __init__(self, media_type: str) -> None:
        super().__init__(f'Media type "{media_type}" is not registered')
        self.media_type = media_type


class UpstreamError(MediaSearchError):
    """Non-success response (or transport failure, ``status=None``) from a catalog."""

    def __init__(self, status: int | None, url: str = "", message: str | None = None) -> None:
        detail = message or f"upstream request failed status={status if status is not None else 'error'}"
        super().__init__(f"{detail} url={url}" if url else detail)
        self.status = status
        self.url = url


class MalformedUpstreamResponse(MediaSearchError):
    def __init__(self, context: str, detail: str = "") -> None:
        super().__init__(f"malformed upstream response context={context} {detail}".strip())
        self.context = context
        self.detail = detail


class CredentialUnavailable(MediaSearchError):
    def __init__(self, service_id: str, message: str | None = None) -> None:
        super().__init__(message or f"credentials for {service_id} are not configured")
        self.service_id = service_id
