from core.headers import HeaderBuilder, basic_auth_value, client_id_from, merge_header_items
from core.mapping import ClientMapping
from core.request_types import build_upstream_url


def test_basic_auth_value_encodes_username_and_password():
    assert basic_auth_value("u", "p") == "Basic dTpw"
    assert basic_auth_value("user", "pa:ss") == "Basic dXNlcjpwYTpzcw=="


def test_client_id_from_is_case_insensitive():
    assert client_id_from({"X-OpenHIM-ClientID": "clinicA"}) == "clinicA"
    assert client_id_from({"x-openhim-clientid": "clinicB"}) == "clinicB"
    assert client_id_from({"content-type": "text/plain"}) is None


def test_forward_headers_unchanged_without_mapping():
    inbound = {"authorization": "Bearer original", "accept": "application/json"}
    forwarded = HeaderBuilder().build_forward_headers(inbound, None)
    assert forwarded == inbound
    assert forwarded is not inbound


def test_forward_headers_overwrite_authorization_for_mapping():
    inbound = {
        "authorization": "Bearer original",
        "AUTHORIZATION": "Basic stale",
        "x-openhim-clientid": "clinicA",
    }
    mapping = ClientMapping(client_id="clinicA", username="u", password="p")
    forwarded = HeaderBuilder().build_forward_headers(inbound, mapping)

    auth_keys = [k for k in forwarded if k.lower() == "authorization"]
    assert auth_keys == ["Authorization"]
    assert forwarded["Authorization"] == "Basic dTpw"
    assert forwarded["x-openhim-clientid"] == "clinicA"
    assert inbound["authorization"] == "Bearer original"


def test_build_upstream_url_replaces_path():
    url = build_upstream_url("http://ups:8080", "/patients/123")
    assert url == "http://ups:8080/patients/123"


def test_build_upstream_url_replaces_base_path_segment():
    url = build_upstream_url("https://ups.example.com/fhir/r4", "/Patient")
    assert url == "https://ups.example.com/Patient"


def test_build_upstream_url_keeps_base_query_string():
    url = build_upstream_url("http://ups:8080/ignored?apikey=abc", "/patients/123")
    assert url == "http://ups:8080/patients/123?apikey=abc"


def test_merge_header_items_joins_repeated_headers():
    merged = merge_header_items(
        [("x-dup", "a"), ("accept", "*/*"), ("x-dup", "b"), ("cookie", "a=1"), ("cookie", "b=2")]
    )

    assert merged == {"x-dup": "a, b", "accept": "*/*", "cookie": "a=1; b=2"}


def test_build_upstream_url_keeps_percent_escapes():
    assert build_upstream_url("http://ups:8080?k=v", "/a%2Fb") == "http://ups:8080/a%2Fb?k=v"
    assert build_upstream_url("http://ups:8080", "/files/a%3Fb") == "http://ups:8080/files/a%3Fb"
    assert build_upstream_url("http://ups:8080", "/files/a%23b") == "http://ups:8080/files/a%23b"
