"""Tests for the catalog API client."""

from unittest.mock import Mock, patch

import pytest
import requests

from repoman.core.catalog_client import CatalogClient, build_repo_infos
from repoman.core.errors import CatalogError, UnauthorizedError
from repoman.core.types import Assignment, CatalogRepo, Course, RepoInfo


def response(status_code=200, payload=None, json_error=None):
    resp = Mock()
    resp.status_code = status_code
    if json_error is not None:
        resp.json.side_effect = json_error
    else:
        resp.json.return_value = payload
    return resp


@pytest.fixture
def client():
    return CatalogClient("https://catalog.example.com/", api_key="secret", timeout=5)


@patch('repoman.core.catalog_client.requests.get')
class TestCatalogClient:
    def test_get_courses(self, get, client):
        get.return_value = response(payload=[{'id': 1, 'name': 'Systems'}, {'id': 'b2', 'name': 'Compilers'}])

        assert client.get_courses() == [Course(id='1', name='Systems'), Course(id='b2', name='Compilers')]
        url = get.call_args[0][0]
        assert url == "https://catalog.example.com/api/v1/courses"
        assert get.call_args[1]['headers']['Authorization'] == "Bearer secret"
        assert get.call_args[1]['timeout'] == 5

    def test_get_assignments(self, get, client):
        get.return_value = response(payload=[{'id': 'a1', 'name': 'Shell'}])

        assert client.get_assignments('c9') == [Assignment(id='a1', name='Shell')]
        assert get.call_args[0][0].endswith("/api/v1/courses/c9/assignments")

    def test_repo_names_derived_from_url(self, get, client):
        get.return_value = response(payload=[
            {'name': 'alice', 'url': 'https://github.com/org/hw1-alice'},
            {'name': '', 'url': 'git@github.com:org/hw1-bob.git'},
            {'name': 'unknown', 'url': 'https://github.com/org/hw1-carol.git'},
            {'url': 'git@github.com:hw1-dave.git'},
        ])

        repos = client.get_assignment_repos('a1')
        assert [r.name for r in repos] == ['alice', 'hw1-bob', 'hw1-carol', 'hw1-dave']
        assert get.call_args[0][0].endswith("/api/v1/assignments/a1/repos")

    def test_unauthorized(self, get, client):
        get.return_value = response(status_code=401)
        with pytest.raises(UnauthorizedError, match="invalid API key"):
            client.get_courses()

    def test_unexpected_status(self, get, client):
        get.return_value = response(status_code=500)
        with pytest.raises(CatalogError, match="unexpected status code: 500"):
            client.get_courses()

    def test_transport_failure(self, get, client):
        get.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(CatalogError, match="request failed"):
            client.get_courses()

    def test_bad_json(self, get, client):
        get.return_value = response(json_error=ValueError("Expecting value"))
        with pytest.raises(CatalogError, match="failed to decode"):
            client.get_courses()

    def test_not_a_list(self, get, client):
        get.return_value = response(payload={'detail': 'oops'})
        with pytest.raises(CatalogError, match="expected a list"):
            client.get_assignment_repos('a1')


def test_no_api_key_sends_no_authorization():
    assert 'Authorization' not in CatalogClient("https://catalog.example.com").headers


def test_build_repo_infos(tmp_path):
    repos = [CatalogRepo(name='hw1-alice', url='https://github.com/org/hw1-alice')]
    infos = build_repo_infos(repos, str(tmp_path), use_http=True)
    assert infos == [RepoInfo(
        name='hw1-alice',
        url='https://github.com/org/hw1-alice',
        path=str(tmp_path / 'hw1-alice'),
        use_http=True
    )]
