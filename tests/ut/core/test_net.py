"""URL 校验与 HTTP GET 测试"""

import urllib.error
from unittest.mock import MagicMock, patch

import pytest

from modsync.core.exceptions import RegistryError, ValidationError
from modsync.utils.net import build_url, http_get, http_get_json, validate_url_scheme


class TestValidateUrlScheme:
    def test_http_ok(self) -> None:
        validate_url_scheme("http://example.com/api")

    def test_https_ok(self) -> None:
        validate_url_scheme("https://example.com/api")

    def test_file_rejected(self) -> None:
        with pytest.raises(ValidationError, match="不允许的 URL 协议"):
            validate_url_scheme("file:///etc/passwd")

    def test_empty_scheme_rejected(self) -> None:
        with pytest.raises(ValidationError, match="不允许的 URL 协议"):
            validate_url_scheme("/local/path")

    def test_context_in_error(self) -> None:
        with pytest.raises(ValidationError, match="modrinth"):
            validate_url_scheme("file:///x", context="modrinth")


class TestBuildUrl:
    def test_joins_slashes(self) -> None:
        assert build_url("https://api.x/v2/", "/project/a") == "https://api.x/v2/project/a"

    def test_encodes_params(self) -> None:
        url = build_url("https://api.x", "version_file/abc", {"algorithm": "sha1"})
        assert url == "https://api.x/version_file/abc?algorithm=sha1"


def _response(body: bytes) -> MagicMock:
    resp = MagicMock()
    resp.read.return_value = body
    resp.__enter__.return_value = resp
    return resp


class TestHttpGet:
    def test_returns_body_and_sends_user_agent(self) -> None:
        with patch("urllib.request.urlopen", return_value=_response(b"data")) as mock_open:
            assert http_get("https://x/y", user_agent="modsync/test") == b"data"
        req = mock_open.call_args[0][0]
        assert req.get_header("User-agent") == "modsync/test"

    def test_http_error_carries_status(self) -> None:
        err = urllib.error.HTTPError("https://x/y", 404, "Not Found", {}, None)
        with patch("urllib.request.urlopen", side_effect=err):
            with pytest.raises(RegistryError) as exc_info:
                http_get("https://x/y", user_agent="ua")
        assert exc_info.value.status == 404

    def test_network_error(self) -> None:
        with patch("urllib.request.urlopen", side_effect=urllib.error.URLError("down")):
            with pytest.raises(RegistryError, match="网络错误") as exc_info:
                http_get("https://x/y", user_agent="ua")
        assert exc_info.value.status is None

    def test_invalid_json(self) -> None:
        with patch("urllib.request.urlopen", return_value=_response(b"{not json")):
            with pytest.raises(RegistryError, match="响应格式错误"):
                http_get_json("https://x/y", user_agent="ua")
