"""Conversion between SSH and HTTPS remote URL forms."""

from ..core.errors import InvalidURLError


def _strip_suffix(value: str, suffix: str) -> str:
    if suffix and value.endswith(suffix):
        return value[:-len(suffix)]
    return value


def to_ssh(url: str) -> str:
    """Convert an HTTP(S) git URL to the scp-style SSH form.

    ``https://github.com/user/repo`` becomes ``git@github.com:user/repo.git``.
    Anything that is not an HTTP(S) URL is returned unchanged.

    Args:
        url: Remote URL

    Returns:
        SSH URL, or the input unchanged
    """
    for prefix in ("https://", "http://"):
        if url.startswith(prefix):
            rest = _strip_suffix(url[len(prefix):], "/")
            host, sep, repo_path = rest.partition("/")
            if not sep:
                return url
            if not repo_path.endswith(".git"):
                repo_path += ".git"
            return f"git@{host}:{repo_path}"
    return url


def to_http(url: str) -> str:
    """Convert an SSH git URL to the HTTPS form.

    Handles both ``git@host:path.git`` and ``ssh://git@host/path.git``.
    Anything else is returned unchanged.

    Args:
        url: Remote URL

    Returns:
        HTTPS URL, or the input unchanged
    """
    if url.startswith("git@"):
        rest = _strip_suffix(_strip_suffix(url[4:], ".git"), "/")
        host, sep, repo_path = rest.partition(":")
        if sep:
            return f"https://{host}/{repo_path}"
    elif url.startswith("ssh://git@"):
        rest = _strip_suffix(_strip_suffix(url[10:], ".git"), "/")
        return "https://" + rest
    return url


def normalize_url(url: str, use_http: bool) -> str:
    """Pick the transport form requested by ``use_http``."""
    return to_http(url) if use_http else to_ssh(url)


def extract_repo_name(url: str) -> str:
    """Extract a short repository name from a git URL.

    Examples:
        >>> extract_repo_name("https://github.com/user/repo.git")
        'repo'
        >>> extract_repo_name("git@github.com:repo.git")
        'repo'
    """
    name = _strip_suffix(_strip_suffix(url, "/"), ".git")
    name = name.rsplit("/", 1)[-1]
    # scp-style URL with no slash between host and repo
    if ":" in name:
        name = name.rsplit(":", 1)[-1]
    return name


def validate_url(url: str) -> None:
    """Reject URLs that git could misread as options or split arguments.

    Raises:
        InvalidURLError: If the URL contains whitespace or starts with '-'
    """
    if not url or url.startswith("-") or any(ch.isspace() for ch in url):
        raise InvalidURLError(url)
