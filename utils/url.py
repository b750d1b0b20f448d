"""Base URL helpers for upstream channels."""


def normalize_base_url(base_url: str | None) -> str:
    """Return a base URL that `/v1/...` paths can be appended to.

    Surrounding whitespace and trailing slashes are dropped, as is a single
    trailing `/v1` segment, so `https://api.example.com/v1/` and
    `https://api.example.com` both normalize to `https://api.example.com`.
    """
    if not base_url:
        return ""

    url = base_url.strip().rstrip("/")
    if url.lower().endswith("/v1"):
        url = url[: -len("/v1")].rstrip("/")
    return url
