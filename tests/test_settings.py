from __future__ import annotations

import textwrap

import pytest

from cronaudit.config import settings as settings_module
from cronaudit.config.settings import Settings, StorageConfig, get_settings, reset_settings


@pytest.fixture(autouse=True)
def _clean_settings(monkeypatch):
    monkeypatch.delenv("CRONAUDIT_DB_PATH", raising=False)
    monkeypatch.delenv("CRONAUDIT_CONFIG", raising=False)
    reset_settings()
    yield
    reset_settings()


def _write_config(tmp_path, content: str):
    path = tmp_path / "cronaudit.yaml"
    path.write_text(textwrap.dedent(content), encoding="utf-8")
    return path


def test_from_yaml_parses_jobs_and_storage(tmp_path):
    path = _write_config(
        tmp_path,
        """
        scheduler_timezone: Asia/Shanghai
        storage:
          backend: sqlite
          db_path: /tmp/audit.db
          table_name: billing_cron_logs
          raise_errors: true
        jobs:
          - name: nightly-sync
            schedule: "0 2 * * *"
            task: "sample_jobs:sync_orders"
            batch_size_fn: "sample_jobs:count_orders"
            retry_policy:
              enabled: true
              max_attempts: 5
              delay: 2.5
          - name: cleanup
            schedule: "*/15 * * * *"
            task: "sample_jobs:sync_orders"
        """,
    )

    settings = Settings.from_yaml(path)

    assert settings.scheduler_timezone == "Asia/Shanghai"
    assert settings.storage.db_path == "/tmp/audit.db"
    assert settings.storage.table_name == "billing_cron_logs"
    assert settings.storage.raise_errors is True
    assert [job.name for job in settings.jobs] == ["nightly-sync", "cleanup"]

    nightly = settings.jobs[0]
    assert nightly.batch_size_fn == "sample_jobs:count_orders"
    assert nightly.retry_policy.enabled is True
    assert nightly.retry_policy.max_attempts == 5
    assert nightly.retry_policy.delay == 2.5

    cleanup = settings.jobs[1]
    assert cleanup.batch_size_fn is None
    assert cleanup.retry_policy.enabled is False


def test_invalid_job_items_are_skipped(tmp_path):
    path = _write_config(
        tmp_path,
        """
        jobs:
          - name: ok
            schedule: "* * * * *"
            task: "sample_jobs:sync_orders"
          - name: bad-retry
            schedule: "* * * * *"
            task: "sample_jobs:sync_orders"
            retry_policy: {max_attempts: -2}
          - schedule: "* * * * *"
          - just-a-string
        """,
    )

    settings = Settings.from_yaml(path)

    assert [job.name for job in settings.jobs] == ["ok"]


def test_missing_file_returns_defaults(tmp_path):
    settings = Settings.from_yaml(tmp_path / "nope.yaml")

    assert settings.jobs == []
    assert settings.storage.backend == "sqlite"
    assert settings.storage.table_name == "cron_audit_logs"


def test_malformed_yaml_returns_defaults(tmp_path):
    path = _write_config(tmp_path, "jobs: [unterminated\n")

    assert Settings.from_yaml(path).jobs == []


def test_env_overrides_db_path(monkeypatch):
    monkeypatch.setenv("CRONAUDIT_DB_PATH", "/var/lib/cronaudit/audit.db")

    assert StorageConfig(db_path="./local.db").db_path == "/var/lib/cronaudit/audit.db"


def test_get_settings_uses_config_env_and_caches(tmp_path, monkeypatch):
    path = _write_config(
        tmp_path,
        """
        storage:
          backend: noop
        """,
    )
    monkeypatch.setenv("CRONAUDIT_CONFIG", str(path))

    first = get_settings()
    assert first.storage.backend == "noop"
    assert get_settings() is first

    reset_settings()
    assert settings_module._settings is None
