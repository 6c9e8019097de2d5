"""Catalog API client for courses, assignments and assignment repositories."""

import logging
import requests
from typing import List, Dict, Any, Optional, Sequence

from .errors import CatalogError, UnauthorizedError
from .types import Assignment, CatalogRepo, Course, RepoInfo
from ..utils.urls import extract_repo_name

logger = logging.getLogger('repoman')

PLACEHOLDER_NAMES = {"", "unknown"}


class CatalogClient:
    """Read-only client for the repoman web application."""

    def __init__(self, base_url: str, api_key: Optional[str] = None, timeout: float = 30.0):
        """Initialize catalog client.

        Args:
            base_url: Service URL, without the /api/v1 suffix
            api_key: Bearer token
            timeout: Request timeout in seconds
        """
        self.base_url = base_url.rstrip('/')
        self.api_key = api_key
        self.timeout = timeout
        self.headers = {'Accept': 'application/json'}

        if api_key:
            self.headers['Authorization'] = f'Bearer {api_key}'

    def _get(self, path: str) -> Any:
        """GET an API path and decode the JSON body.

        Raises:
            UnauthorizedError: API key rejected
            CatalogError: Request failed or returned an unexpected response
        """
        url = f"{self.base_url}/api/v1{path}"
        logger.debug(f"GET {url}")
        try:
            response = requests.get(url, headers=self.headers, timeout=self.timeout)
        except requests.RequestException as e:
            raise CatalogError(f"request failed: {e}") from e

        if response.status_code == 401:
            raise UnauthorizedError("unauthorized: invalid API key")
        if response.status_code != 200:
            raise CatalogError(f"unexpected status code: {response.status_code}")

        try:
            return response.json()
        except ValueError as e:
            raise CatalogError(f"failed to decode response from {path}: {e}") from e

    def _get_list(self, path: str, what: str) -> List[Dict[str, Any]]:
        data = self._get(path)
        if not isinstance(data, list):
            raise CatalogError(f"failed to decode {what}: expected a list")
        return data

    def get_courses(self) -> List[Course]:
        """Get the courses visible to the API key."""
        return [
            Course(id=str(item['id']), name=item.get('name', ''))
            for item in self._get_list("/courses", "courses")
        ]

    def get_assignments(self, course_id: str) -> List[Assignment]:
        """Get the assignments of a course."""
        return [
            Assignment(id=str(item['id']), name=item.get('name', ''))
            for item in self._get_list(f"/courses/{course_id}/assignments", "assignments")
        ]

    def get_assignment_repos(self, assignment_id: str) -> List[CatalogRepo]:
        """Get the repositories of an assignment.

        Missing or placeholder names are derived from the repository URL.
        """
        repos = []
        for item in self._get_list(f"/assignments/{assignment_id}/repos", "repos"):
            url = item.get('url', '')
            name = item.get('name') or ''
            if name in PLACEHOLDER_NAMES:
                name = extract_repo_name(url)
            repos.append(CatalogRepo(name=name, url=url))

        logger.info(f"Found {len(repos)} repositories for assignment {assignment_id}")
        return repos


def build_repo_infos(repos: Sequence[CatalogRepo], base_dir: str, use_http: bool = False) -> List[RepoInfo]:
    """Turn catalog records into descriptors rooted at ``base_dir``."""
    return [RepoInfo.from_catalog(repo, base_dir, use_http) for repo in repos]
