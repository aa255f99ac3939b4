"""API tests for the pairing and configuration routes."""

from fastapi.testclient import TestClient

from conftest import CLIENT_HEADERS, read_option, write_option
from envelope import encrypt_body

PAIR_URL = "/boxtal-connect/v1/shop/pair"
CONFIG_URL = "/boxtal-connect/v1/shop/configuration"


def pair(client: TestClient, body, headers=CLIENT_HEADERS):
    return client.patch(PAIR_URL, content=encrypt_body(body), headers=headers)


def pair_shop(db_path, access_key="a", secret_key="b"):
    write_option(db_path, "paired_access_key", access_key)
    write_option(db_path, "paired_secret_key", secret_key)


class TestTransportAuth:
    def test_missing_secret(self, client: TestClient, db_path):
        response = pair(client, {"accessKey": "a", "secretKey": "b"}, headers={})
        assert response.status_code == 401
        assert read_option(db_path, "paired_access_key") is None

    def test_wrong_secret(self, client: TestClient):
        response = client.delete(CONFIG_URL, headers={"X-Boxtal-Secret": "nope"})
        assert response.status_code == 401


class TestPairing:
    def test_initial_pairing(self, client: TestClient, db_path):
        write_option(db_path, "active_notices", ["setup-wizard"])

        response = pair(client, {"accessKey": "a", "secretKey": "b"})

        assert response.status_code == 200
        assert read_option(db_path, "paired_access_key") == "a"
        assert read_option(db_path, "paired_secret_key") == "b"
        assert read_option(db_path, "active_notices") == ["pairing"]
        assert read_option(db_path, "notice_pairing") == {"result": 1}

    def test_repair_without_callback_is_forbidden(self, client: TestClient, db_path):
        pair_shop(db_path, "old-a", "old-b")

        response = pair(client, {"accessKey": "a", "secretKey": "b"})

        assert response.status_code == 403
        assert read_option(db_path, "paired_access_key") == "old-a"
        assert read_option(db_path, "paired_secret_key") == "old-b"
        assert read_option(db_path, "pairing_update_url") is None

    def test_pairing_update(self, client: TestClient, db_path):
        pair_shop(db_path, "old-a", "old-b")
        write_option(db_path, "active_notices", ["pairing"])

        response = pair(client, {
            "accessKey": "a",
            "secretKey": "b",
            "pairCallbackUrl": "https://boxtal.test/callback",
        })

        assert response.status_code == 200
        assert read_option(db_path, "paired_access_key") == "a"
        assert read_option(db_path, "pairing_update_url") == "https://boxtal.test/callback"
        assert read_option(db_path, "active_notices") == ["pairing-update"]

    def test_undecryptable_body(self, client: TestClient, db_path):
        response = client.patch(PAIR_URL, content=b"garbage", headers=CLIENT_HEADERS)

        assert response.status_code == 400
        assert read_option(db_path, "paired_access_key") is None
        assert read_option(db_path, "active_notices") == ["pairing"]
        assert read_option(db_path, "notice_pairing") == {"result": 0}

    def test_empty_body(self, client: TestClient, db_path):
        response = client.patch(PAIR_URL, headers=CLIENT_HEADERS)

        assert response.status_code == 400
        assert read_option(db_path, "notice_pairing") == {"result": 0}

    def test_missing_secret_key(self, client: TestClient, db_path):
        response = pair(client, {"accessKey": "a"})

        assert response.status_code == 400
        assert read_option(db_path, "paired_access_key") is None
        assert read_option(db_path, "notice_pairing") == {"result": 0}

    def test_new_update_replaces_pending_update(self, client: TestClient, db_path):
        pair_shop(db_path, "a", "b")
        write_option(db_path, "pairing_update_url", "https://boxtal.test/old-callback")
        write_option(db_path, "active_notices", ["pairing-update"])

        response = pair(client, {
            "accessKey": "new-a",
            "secretKey": "new-b",
            "pairCallbackUrl": "https://boxtal.test/new-callback",
        })

        assert response.status_code == 200
        assert read_option(db_path, "paired_access_key") == "new-a"
        assert read_option(db_path, "paired_secret_key") == "new-b"
        assert read_option(db_path, "pairing_update_url") == "https://boxtal.test/new-callback"
        assert read_option(db_path, "active_notices") == ["pairing-update"]

    def test_repair_without_callback_during_update_is_forbidden(self, client: TestClient, db_path):
        pair_shop(db_path, "a", "b")
        write_option(db_path, "pairing_update_url", "https://boxtal.test/callback")
        write_option(db_path, "active_notices", ["pairing-update"])

        response = pair(client, {"accessKey": "new-a", "secretKey": "new-b"})

        assert response.status_code == 403
        assert read_option(db_path, "paired_access_key") == "a"
        assert read_option(db_path, "paired_secret_key") == "b"
        assert read_option(db_path, "pairing_update_url") == "https://boxtal.test/callback"
        assert read_option(db_path, "active_notices") == ["pairing-update"]

    def test_bad_body_on_paired_shop_keeps_keys(self, client: TestClient, db_path):
        pair_shop(db_path)

        response = pair(client, {"pairCallbackUrl": "https://boxtal.test/callback"})

        assert response.status_code == 400
        assert read_option(db_path, "paired_access_key") == "a"
        assert read_option(db_path, "pairing_update_url") is None


class TestUpdateConfiguration:
    def test_update(self, client: TestClient, db_path):
        body = {
            "mapsEndpointUrl": "https://maps.boxtal.test",
            "parcelPointNetworks": {"MONR": ["MONR_NETWORK"]},
        }
        response = client.patch(CONFIG_URL, content=encrypt_body(body), headers=CLIENT_HEADERS)

        assert response.status_code == 200
        assert read_option(db_path, "maps_endpoint_url") == "https://maps.boxtal.test"
        assert read_option(db_path, "parcel_point_networks") == {"MONR": ["MONR_NETWORK"]}

    def test_parse_failure(self, client: TestClient, db_path):
        body = {"parcelPointNetworks": "nope"}
        response = client.patch(CONFIG_URL, content=encrypt_body(body), headers=CLIENT_HEADERS)

        assert response.status_code == 400
        assert read_option(db_path, "parcel_point_networks") is None

    def test_undecryptable_body(self, client: TestClient):
        response = client.patch(CONFIG_URL, content=b"{}", headers=CLIENT_HEADERS)
        assert response.status_code == 400


class TestDeleteConfiguration:
    def test_matching_access_key(self, client: TestClient, db_path):
        pair_shop(db_path, "X")
        write_option(db_path, "maps_endpoint_url", "https://maps.boxtal.test")

        response = client.request(
            "DELETE", CONFIG_URL, content=encrypt_body({"accessKey": "X"}), headers=CLIENT_HEADERS
        )

        assert response.status_code == 200
        assert read_option(db_path, "maps_endpoint_url") is None

    def test_access_key_mismatch(self, client: TestClient, db_path):
        pair_shop(db_path, "X")
        write_option(db_path, "maps_endpoint_url", "https://maps.boxtal.test")

        response = client.request(
            "DELETE", CONFIG_URL, content=encrypt_body({"accessKey": "Y"}), headers=CLIENT_HEADERS
        )

        assert response.status_code == 403
        assert read_option(db_path, "maps_endpoint_url") == "https://maps.boxtal.test"

    def test_unpaired_shop(self, client: TestClient):
        response = client.request(
            "DELETE", CONFIG_URL, content=encrypt_body({"accessKey": "X"}), headers=CLIENT_HEADERS
        )
        assert response.status_code == 403

    def test_undecryptable_body(self, client: TestClient):
        response = client.request("DELETE", CONFIG_URL, content=b"nope", headers=CLIENT_HEADERS)
        assert response.status_code == 400
