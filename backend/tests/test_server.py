from family_ledger.core.config import Settings
from family_ledger.server import build_configs


def test_http_only_by_default() -> None:
    configs = build_configs(Settings(port=8080, use_https=False))

    assert [c.port for c in configs] == [8080]
    assert configs[0].ssl_certfile is None


def test_https_without_certificates_falls_back_to_http(tmp_path) -> None:
    cfg = Settings(
        use_https=True,
        ssl_cert_path=str(tmp_path / "missing.crt"),
        ssl_key_path=str(tmp_path / "missing.key"),
    )

    assert len(build_configs(cfg)) == 1


def test_https_added_when_certificates_exist(tmp_path) -> None:
    cert = tmp_path / "server.crt"
    key = tmp_path / "server.key"
    cert.write_text("cert")
    key.write_text("key")

    configs = build_configs(
        Settings(port=5000, https_port=5443, use_https=True, ssl_cert_path=str(cert), ssl_key_path=str(key))
    )

    assert [c.port for c in configs] == [5000, 5443]
    assert configs[1].ssl_certfile == str(cert)
