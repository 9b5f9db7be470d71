import httpx
from fastapi.testclient import TestClient

from app import create_app
from core.config import ApiSettings, Config, MediatorRegistration, ServerSettings
from core.live_config import MediatorConfig
from core.mapping import ClientMapping

URN = "urn:mediator:test"


def _static_config(upstream: str = "http://ups:8080") -> Config:
    return Config(
        register=False,
        server=ServerSettings(log_requests=False),
        mediator=MediatorRegistration(
            urn=URN,
            config=MediatorConfig(
                upstream_url=upstream,
                mapping=(ClientMapping(client_id="clinicA", username="u", password="p"),),
            ),
        ),
    )


def test_any_method_and_path_is_relayed_with_openhim_envelope(logger):
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(202, text="accepted", headers={"x-upstream": "yes"})

    app = create_app(_static_config(), logger, transport=httpx.MockTransport(handler))
    with TestClient(app) as client:
        response = client.post(
            "/patients/123",
            content=b"<Patient/>",
            headers={"x-openhim-clientid": "clinicA", "content-type": "application/xml"},
        )
        deleted = client.delete("/a/b/c")

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json+openhim"
    envelope = response.json()
    assert envelope["x-mediator-urn"] == URN
    assert envelope["status"] == "Successful"
    assert envelope["response"]["status"] == 200
    assert envelope["response"]["body"] == "accepted"
    assert envelope["response"]["headers"]["x-upstream"] == "yes"
    assert envelope["orchestrations"][0]["response"]["status"] == 202

    upstream = captured[0]
    assert upstream.method == "POST"
    assert str(upstream.url) == "http://ups:8080/patients/123"
    assert upstream.content == b"<Patient/>"
    assert upstream.headers["authorization"] == "Basic dTpw"

    assert deleted.status_code == 200
    assert captured[1].method == "DELETE"
    assert captured[1].url.path == "/a/b/c"
    assert "authorization" not in captured[1].headers
    assert logger.configs[0][1] == "static"


def test_unreachable_upstream_still_answers_200_with_failed_envelope(logger):
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("Connection refused", request=request)

    app = create_app(_static_config(), logger, transport=httpx.MockTransport(handler))
    with TestClient(app) as client:
        response = client.get("/patients/123", headers={"x-openhim-clientid": "clinicA"})

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/json+openhim"
    assert response.json()["status"] == "Failed"
    assert response.json()["response"]["status"] == 500
    assert response.json()["response"]["body"] == "Connection refused"
    assert response.json()["orchestrations"] == []


def test_registering_mediator_relays_with_fetched_config(logger):
    calls: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        host = request.url.host
        path = request.url.path
        if host == "openhim":
            calls.append(f"{request.method} {path}")
            if path.startswith("/authenticate/"):
                return httpx.Response(200, json={"salt": "salt", "ts": "2026-10-17T00:00:00.000Z"})
            if path == "/mediators":
                return httpx.Response(201)
            if path.endswith("/heartbeat"):
                return httpx.Response(
                    200,
                    json={
                        "upstreamURL": "http://fetched:9000",
                        "mapping": [{"clientID": "clinicA", "username": "u", "password": "p"}],
                    },
                )
            return httpx.Response(404)
        return httpx.Response(200, text=f"{host}{path}")

    config = Config(
        api=ApiSettings(api_url="https://openhim:8080"),
        server=ServerSettings(log_requests=False, heartbeat_interval=3600),
        mediator=MediatorRegistration(urn=URN),
        register=True,
    )
    app = create_app(config, logger, transport=httpx.MockTransport(handler))
    with TestClient(app) as client:
        response = client.get("/patients/1", headers={"x-openhim-clientid": "clinicA"})

    assert response.json()["response"]["body"] == "fetched/patients/1"
    assert "POST /mediators" in calls
    assert f"POST /mediators/{URN}/heartbeat" in calls
    assert logger.configs[0][0].upstream_url == "http://fetched:9000"
    assert logger.configs[0][1] == "initial"


def test_extension_methods_are_relayed(logger):
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(207, text="multi")

    app = create_app(_static_config(), logger, transport=httpx.MockTransport(handler))
    with TestClient(app) as client:
        propfind = client.request("PROPFIND", "/dav/x")
        custom = client.request("PURGE", "/cache/item")

    assert propfind.status_code == 200
    assert propfind.json()["status"] == "Successful"
    assert custom.status_code == 200
    assert [r.method for r in captured] == ["PROPFIND", "PURGE"]
    assert captured[0].url.path == "/dav/x"


def test_percent_encoded_path_is_forwarded_unchanged(logger):
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200)

    app = create_app(_static_config("http://ups:8080?k=v"), logger, transport=httpx.MockTransport(handler))
    with TestClient(app) as client:
        for path in ("/files/a%3Fb", "/files/a%2Fb", "/files/a%23b"):
            assert client.get(path).json()["status"] == "Successful"

    assert [r.url.raw_path for r in captured] == [
        b"/files/a%3Fb?k=v",
        b"/files/a%2Fb?k=v",
        b"/files/a%23b?k=v",
    ]


def test_repeated_inbound_headers_all_reach_upstream(logger):
    captured: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        captured.append(request)
        return httpx.Response(200)

    app = create_app(_static_config(), logger, transport=httpx.MockTransport(handler))
    with TestClient(app) as client:
        client.get("/patients/1", headers=[("x-dup", "a"), ("x-dup", "b")])

    assert captured[0].headers["x-dup"] == "a, b"
