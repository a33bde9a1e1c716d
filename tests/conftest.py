import pytest


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch, tmp_path):
    """Keep tests away from the real config file, data dir and credentials."""
    for name in ("QQBOT_APP_ID", "QQBOT_CLIENT_SECRET", "QQBOT_MAX_PAYLOAD_CHARS", "QQBOT_API_BASE_URL"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("QQBOT_CONFIG", str(tmp_path / "config.json"))
    monkeypatch.setenv("QQBOT_DATA_DIR", str(tmp_path / "data"))
