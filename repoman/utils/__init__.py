"""Utility modules for repoman."""

from .urls import to_ssh, to_http, extract_repo_name, validate_url, normalize_url

__all__ = [
    'to_ssh',
    'to_http',
    'extract_repo_name',
    'validate_url',
    'normalize_url',
]
