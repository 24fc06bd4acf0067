"""
Unit tests for upload bearer token authorization.

Auth runs before the body is read; every failure is a 401 with a
WWW-Authenticate challenge and nothing is written.
"""

import pytest

from backend.src.config.settings import AppSettings, get_settings


UPLOAD_URL = "/api/v1/upload"


def _multipart():
    return {
        "data": {"version": "1.0.0", "sar_version": "1.0.0-0-gabc", "system": "linux",
                 "commit": "abc", "branch": "master", "count": "1", "hashes[0]": "0" * 64},
        "files": {"files[0]": ("sar.so", b"content")},
    }


class TestRequireUploadToken:
    """Tests for require_upload_token."""

    def test_missing_header(self, test_client, bin_root):
        response = test_client.post(UPLOAD_URL, **_multipart())

        assert response.status_code == 401
        assert response.json() == {"status": 401, "message": "Authorization header required."}
        assert response.headers["www-authenticate"] == "Bearer"
        assert list(bin_root.iterdir()) == []

    def test_wrong_scheme(self, test_client):
        response = test_client.post(
            UPLOAD_URL, headers={"Authorization": "Basic dGVzdA=="}, **_multipart()
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Authorization must be Bearer."

    @pytest.mark.parametrize("token", ["wrong-token", "test-token-extra", "test-toke"])
    def test_wrong_token(self, test_client, bin_root, token):
        response = test_client.post(
            UPLOAD_URL, headers={"Authorization": f"Bearer {token}"}, **_multipart()
        )

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token."
        assert list(bin_root.iterdir()) == []

    def test_uploads_disabled_without_configured_token(self, test_client, bin_root):
        from backend.src.main import app

        app.dependency_overrides[get_settings] = lambda: AppSettings(
            API_TOKEN="", SAR_DL_BIN_FOLDER=str(bin_root)
        )

        response = test_client.post(UPLOAD_URL, headers={"Authorization": "Bearer "}, **_multipart())

        assert response.status_code == 401
        assert response.json()["message"] == "Invalid token."

    def test_valid_token_passes(self, test_client, auth_headers):
        """With a valid token the request reaches validation (hash mismatch here)."""
        response = test_client.post(UPLOAD_URL, headers=auth_headers, **_multipart())

        assert response.status_code == 400
        assert response.json()["message"] == "File hash mismatch."
