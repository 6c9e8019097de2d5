"""Tests for configuration, credentials and workspace files."""

import json
import logging
import os
import stat

import pytest

from repoman.config import (
    DEFAULT_BASE_URL,
    WORKSPACE_FILE_NAME,
    Config,
    CredentialStore,
    GitSettings,
    WorkspaceConfig,
    find_workspace_root,
)
from repoman.core.errors import AuthenticationError, WorkspaceNotFoundError
from repoman.core.logger import setup_logging


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ('REPOMAN_API_KEY', 'REPOMAN_BASE_URL', 'REPOMAN_MAX_WORKERS',
                 'REPOMAN_GIT', 'REPOMAN_CLONE_TIMEOUT', 'REPOMAN_PULL_TIMEOUT'):
        monkeypatch.delenv(name, raising=False)
    # keep load_dotenv from picking up a developer's .env
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def store(tmp_path):
    return CredentialStore(str(tmp_path / "cfg" / "config.json"))


class TestConfig:
    def test_defaults(self, clean_env, store, tmp_path):
        config = Config.from_env_and_args(credentials=store)
        assert config.base_url == DEFAULT_BASE_URL
        assert config.api_key is None
        assert config.max_workers is None
        assert config.repos_base_dir == os.getcwd()
        assert not config.is_authenticated
        assert config.git == GitSettings()

    def test_args_override_env(self, clean_env, store, monkeypatch):
        monkeypatch.setenv('REPOMAN_API_KEY', 'env-key')
        monkeypatch.setenv('REPOMAN_BASE_URL', 'https://env.example.com/')
        monkeypatch.setenv('REPOMAN_MAX_WORKERS', '3')

        config = Config.from_env_and_args(credentials=store)
        assert config.api_key == 'env-key'
        assert config.base_url == 'https://env.example.com'
        assert config.max_workers == 3

        config = Config.from_env_and_args(api_key='arg-key', max_workers=9, credentials=store)
        assert config.api_key == 'arg-key'
        assert config.max_workers == 9

    def test_credential_store_is_last_resort(self, clean_env, store):
        store.set_api_key('stored-key')
        assert Config.from_env_and_args(credentials=store).api_key == 'stored-key'

    def test_dotenv_file(self, clean_env, store, tmp_path, monkeypatch):
        (tmp_path / ".env").write_text("REPOMAN_API_KEY=dotenv-key\n")
        config = Config.from_env_and_args(credentials=store)
        monkeypatch.delenv('REPOMAN_API_KEY', raising=False)
        assert config.api_key == 'dotenv-key'

    def test_git_settings_from_env(self, clean_env, monkeypatch):
        monkeypatch.setenv('REPOMAN_CLONE_TIMEOUT', '12.5')
        monkeypatch.setenv('REPOMAN_GIT', '/opt/git/bin/git')
        settings = GitSettings.from_env()
        assert settings.clone_timeout == 12.5
        assert settings.executable == '/opt/git/bin/git'
        assert settings.pull_timeout == GitSettings().pull_timeout

    def test_invalid_number(self, clean_env, monkeypatch):
        monkeypatch.setenv('REPOMAN_PULL_TIMEOUT', 'soon')
        with pytest.raises(ValueError, match="REPOMAN_PULL_TIMEOUT"):
            GitSettings.from_env()

    def test_require_auth(self, tmp_path):
        config = Config(base_url=DEFAULT_BASE_URL, repos_base_dir=str(tmp_path))
        with pytest.raises(AuthenticationError):
            config.require_auth()
        config.api_key = 'k'
        config.require_auth()


class TestCredentialStore:
    def test_missing_file(self, store):
        assert store.get_api_key() is None
        assert store.get_base_url() is None

    def test_set_keeps_other_settings(self, store):
        os.makedirs(os.path.dirname(store.path))
        with open(store.path, 'w') as f:
            json.dump({'base_url': 'https://other.example.com'}, f)

        store.set_api_key('secret')
        assert store.get_api_key() == 'secret'
        assert store.get_base_url() == 'https://other.example.com'

    def test_new_file_is_private(self, store):
        store.set_api_key('secret')
        assert stat.S_IMODE(os.stat(store.path).st_mode) == 0o600

    def test_corrupt_file(self, store):
        os.makedirs(os.path.dirname(store.path))
        with open(store.path, 'w') as f:
            f.write("{not json")
        with pytest.raises(ValueError):
            store.get_api_key()


class TestWorkspace:
    def test_save_and_load_from_subdirectory(self, tmp_path):
        workspace = WorkspaceConfig(
            course_id="c1",
            course_name="Systems",
            assignment_id="a7",
            assignment_name="Shell"
        )
        path = workspace.save(str(tmp_path))
        assert os.path.basename(path) == WORKSPACE_FILE_NAME

        nested = tmp_path / "student-repo" / "src"
        nested.mkdir(parents=True)
        loaded = WorkspaceConfig.load(str(nested))

        assert loaded.root == str(tmp_path)
        assert loaded.assignment_id == "a7"
        assert loaded.course_name == "Systems"
        assert find_workspace_root(str(nested)) == str(tmp_path)

    def test_no_workspace(self, tmp_path):
        with pytest.raises(WorkspaceNotFoundError):
            find_workspace_root(str(tmp_path))


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def restore_logger(self):
        yield
        logger = logging.getLogger('repoman')
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()
        logger.setLevel(logging.NOTSET)
        logger.propagate = True

    def test_writes_log_file(self, tmp_path):
        logger = setup_logging("status", log_dir=str(tmp_path))
        logger.info("hello from test")
        for handler in logger.handlers:
            handler.flush()

        log_files = list(tmp_path.glob("repoman_status_*.log"))
        assert len(log_files) == 1
        assert "hello from test" in log_files[0].read_text()
        assert logger is logging.getLogger('repoman')

    def test_console_only_and_root_untouched(self):
        root_handlers = list(logging.getLogger().handlers)
        logger = setup_logging("sync", level=logging.DEBUG)

        assert len(logger.handlers) == 1
        assert logger.level == logging.DEBUG
        assert logging.getLogger().handlers == root_handlers

    def test_repeated_setup_replaces_handlers(self, tmp_path):
        setup_logging("sync", log_dir=str(tmp_path))
        logger = setup_logging("sync")
        assert len(logger.handlers) == 1
