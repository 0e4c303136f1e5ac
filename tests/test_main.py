import pytest

import main


def test_invalid_configuration_exits_without_serving(monkeypatch: pytest.MonkeyPatch) -> None:
    def _load() -> None:
        raise ValueError("AUTH_SERVICE_URL is required but was not provided.")

    def _build_server(settings):
        raise AssertionError("server must not be built without settings")

    monkeypatch.setattr(main.Settings, "load", staticmethod(_load))
    monkeypatch.setattr(main, "build_server", _build_server)

    assert main.main() == main.EXIT_CONFIG_ERROR


def test_server_is_shut_down_after_interrupt(monkeypatch: pytest.MonkeyPatch) -> None:
    events: list[str] = []

    class FakeServer:
        def startup(self) -> None:
            events.append("startup")

        def serve_forever(self) -> None:
            events.append("serve")
            raise KeyboardInterrupt

        def shutdown(self) -> None:
            events.append("shutdown")

    settings = main.Settings(
        auth_service_url="http://auth.local",
        login_email="caller@example.test",
        login_password="secret",
    )
    monkeypatch.setattr(main.Settings, "load", staticmethod(lambda: settings))
    monkeypatch.setattr(main, "build_server", lambda settings: FakeServer())

    assert main.main() == 0
    assert events == ["startup", "serve", "shutdown"]
