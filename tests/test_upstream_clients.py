"""
Tests for the upstream HTTP clients

requests.get is patched throughout; no network is touched.
"""
import pytest
import requests
from unittest.mock import patch

from domain.errors import MalformedPayloadError, SourceUnavailableError
from services.collection_cache import CollectionCache
from services.upstream_clients import USER_AGENT, StaticCollectionClient, get_json


class TestGetJson:
    @patch("services.upstream_clients.requests.get")
    def test_success_passes_timeout_and_headers(self, mock_get, fake_response):
        mock_get.return_value = fake_response(200, {"ok": True})

        assert get_json("https://api.test/x", timeout=4, params={"a": 1}) == {"ok": True}

        kwargs = mock_get.call_args.kwargs
        assert kwargs["timeout"] == 4
        assert kwargs["params"] == {"a": 1}
        assert kwargs["headers"]["User-Agent"] == USER_AGENT

    @patch("services.upstream_clients.requests.get")
    def test_timeout(self, mock_get):
        mock_get.side_effect = requests.exceptions.Timeout()
        with pytest.raises(SourceUnavailableError, match="timeout after 2s"):
            get_json("https://api.test/x", timeout=2)

    @patch("services.upstream_clients.requests.get")
    def test_connection_error(self, mock_get):
        mock_get.side_effect = requests.exceptions.ConnectionError("refused")
        with pytest.raises(SourceUnavailableError, match="request failed"):
            get_json("https://api.test/x", timeout=2)

    @patch("services.upstream_clients.requests.get")
    def test_404_raises_unless_allowed(self, mock_get, fake_response):
        mock_get.return_value = fake_response(404)

        with pytest.raises(SourceUnavailableError, match="status 404"):
            get_json("https://api.test/x", timeout=2)
        assert get_json("https://api.test/x", timeout=2, allow_not_found=True) is None

    @patch("services.upstream_clients.requests.get")
    def test_invalid_json(self, mock_get, fake_response):
        mock_get.return_value = fake_response(200, json_error=ValueError("Expecting value"))
        with pytest.raises(MalformedPayloadError):
            get_json("https://api.test/x", timeout=2)


class TestStaticCollectionClient:
    @patch("services.upstream_clients.requests.get")
    def test_region_ids_skip_records_without_region(self, mock_get, fake_response):
        mock_get.return_value = fake_response(200, [
            {"region_id": 10000002},
            {"region_id": "10000043"},
            {"region_id": None},
            {"station_id": 1},
            "junk",
        ])
        client = StaticCollectionClient("https://static.test/")

        assert client.fetch_region_ids("public/stations/stations_npc.json") == [10000002, 10000043]
        assert mock_get.call_args.args[0] == "https://static.test/public/stations/stations_npc.json"

    @patch("services.upstream_clients.requests.get")
    def test_non_list_collection_is_malformed(self, mock_get, fake_response):
        mock_get.return_value = fake_response(200, {"stations": []})
        with pytest.raises(MalformedPayloadError):
            StaticCollectionClient("https://static.test").fetch_collection("stations.json")

    @patch("services.upstream_clients.requests.get")
    def test_collections_served_from_cache(self, mock_get, fake_response):
        mock_get.return_value = fake_response(200, [{"region_id": 1}])
        client = StaticCollectionClient("https://static.test", cache=CollectionCache(ttl_seconds=60))

        client.fetch_collection("stations.json")
        client.fetch_collection("stations.json")

        assert mock_get.call_count == 1

    def test_unconfigured_base_url(self):
        with pytest.raises(SourceUnavailableError):
            StaticCollectionClient("").fetch_collection("stations.json")


class TestSuccessStatuses:
    @pytest.mark.parametrize("status", [200, 201, 203])
    @patch("services.upstream_clients.requests.get")
    def test_any_2xx_is_success(self, mock_get, status, fake_response):
        mock_get.return_value = fake_response(status, {"best_quotes": {}})
        assert get_json("https://raw.test/1.json", timeout=2) == {"best_quotes": {}}

    @pytest.mark.parametrize("status", [301, 429, 500])
    @patch("services.upstream_clients.requests.get")
    def test_non_2xx_is_failure(self, mock_get, status, fake_response):
        mock_get.return_value = fake_response(status, {})
        with pytest.raises(SourceUnavailableError, match=f"status {status}"):
            get_json("https://raw.test/1.json", timeout=2)
