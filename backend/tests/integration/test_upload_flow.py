"""
Integration tests for the upload-then-query flow.

Tests the full workflow through the HTTP API:
- Batch upload with hashes, listing by channel, latest pointer
- Hash mismatch keeps the previous latest pointer
- Validation and media type errors
- Storage failures
- Re-upload of the same batch
"""

import pytest

from backend.src.utils.hashing import digest


COMMIT = "0b4c5d07376ed288fe1d2f18d36065c393474480"
DLL = b"\x4d\x5a" + b"dll" * 100
PDB = b"pdb" * 50


def _upload(client, headers, files, version="0.0.0-canary", system="windows",
            sar_version="0.0.0-4-g0b4c5d073-canary", hashes=None, count=None, branch="master"):
    data = {
        "version": version,
        "sar_version": sar_version,
        "system": system,
        "commit": COMMIT,
        "branch": branch,
        "count": str(len(files)) if count is None else count,
    }
    multipart = {}
    for i, (name, content) in enumerate(files):
        multipart[f"files[{i}]"] = (name, content, "application/octet-stream")
        data[f"hashes[{i}]"] = digest(content) if hashes is None else hashes[i]
    return client.post("/api/v1/upload", headers=headers, data=data, files=multipart)


class TestUploadFlow:
    """End-to-end upload, list and latest."""

    def test_canary_upload_then_query(self, test_client, auth_headers):
        response = _upload(test_client, auth_headers, [("sar.dll", DLL), ("sar.pdb", PDB)])

        assert response.status_code == 200
        assert response.json() == {"inserted": 2, "ok": True, "failed": []}

        listing = test_client.get("/api/v1/list/canary/windows")
        assert listing.status_code == 200
        entries = listing.json()
        assert len(entries) == 2
        assert {(e["name"], e["hash"]) for e in entries} == {
            ("sar.dll", digest(DLL)),
            ("sar.pdb", digest(PDB)),
        }
        dates = [e["date"] for e in entries]
        assert dates == sorted(dates, reverse=True)
        assert all("path" not in e for e in entries)

        latest = test_client.get("/api/v1/latest/canary")
        assert latest.status_code == 200
        body = latest.json()
        assert body["version"] == "0.0.0-canary"
        assert body["commit"] == COMMIT
        assert body["branch"] == "master"
        assert body["channel"] == "canary"

    def test_hash_mismatch_keeps_previous_latest(self, test_client, auth_headers):
        first = _upload(test_client, auth_headers, [("sar.dll", DLL), ("sar.pdb", PDB)])
        assert first.json()["ok"] is True

        second = _upload(
            test_client,
            auth_headers,
            [("sar.dll", DLL), ("sar.pdb", PDB)],
            branch="feature",
            hashes=[digest(DLL), digest(b"something else")],
        )

        assert second.status_code == 400
        assert second.json() == {"status": 400, "message": "File hash mismatch.", "inserted": 1}

        latest = test_client.get("/api/v1/latest/canary").json()
        assert latest["branch"] == "master"

    def test_hash_mismatch_without_previous_batch(self, test_client, auth_headers):
        response = _upload(test_client, auth_headers, [("sar.dll", DLL)], hashes=["f" * 64])

        assert response.status_code == 400
        assert test_client.get("/api/v1/latest/canary").status_code == 404

    def test_reupload_same_batch(self, test_client, auth_headers, bin_root):
        _upload(test_client, auth_headers, [("sar.dll", DLL), ("sar.pdb", PDB)])
        response = _upload(test_client, auth_headers, [("sar.dll", DLL), ("sar.pdb", PDB)])

        assert response.json()["inserted"] == 2
        assert len(test_client.get("/api/v1/list").json()) == 2
        assert len([p for p in bin_root.rglob("*") if p.is_file()]) == 2

    def test_release_upload_is_default_latest(self, test_client, auth_headers):
        _upload(test_client, auth_headers, [("sar.so", DLL)], version="1.2.3",
                system="linux", sar_version="1.2.3-0-g0b4c5d073")

        response = test_client.get("/api/v1/latest")

        assert response.status_code == 200
        assert response.json()["version"] == "1.2.3"
        assert test_client.get("/api/v1/latest/canary").status_code == 404


class TestUploadErrors:
    """Validation, media type and storage errors."""

    @pytest.mark.parametrize("overrides, message", [
        ({"version": ""}, "Missing version."),
        ({"version": "1.2"}, "Invalid semver version."),
        ({"version": "1.0.0\n"}, "Invalid semver version."),
        ({"sar_version": "1.0.0-0-gabc\n"}, "Invalid SAR version."),
        ({"system": "macos"}, "Invalid system."),
        ({"count": "5"}, "Invalid count."),
        ({"count": "abc"}, "Invalid count."),
    ])
    def test_validation_errors(self, test_client, auth_headers, bin_root, overrides, message):
        response = _upload(test_client, auth_headers, [("sar.dll", DLL)], **overrides)

        assert response.status_code == 400
        assert response.json() == {"status": 400, "message": message}
        assert list(bin_root.iterdir()) == []

    def test_non_multipart_body(self, test_client, auth_headers):
        response = test_client.post("/api/v1/upload", headers=auth_headers, json={"version": "1.0.0"})

        assert response.status_code == 415
        assert response.json()["message"] == "Invalid request body."

    def test_missing_file_part(self, test_client, auth_headers):
        response = _upload(test_client, auth_headers, [("sar.dll", DLL)], count="2")

        assert response.status_code == 415
        assert response.json()["message"] == "Invalid file."

    def test_text_field_instead_of_file(self, test_client, auth_headers):
        data = {
            "version": "1.0.0", "sar_version": "1.0.0-0-gabc", "system": "linux",
            "commit": COMMIT, "branch": "master", "count": "1",
            "files[0]": "not a file", "hashes[0]": digest(b"not a file"),
        }
        # A dummy file part keeps the body multipart
        response = test_client.post(
            "/api/v1/upload", headers=auth_headers, data=data,
            files={"other": ("x.txt", b"x")},
        )

        assert response.status_code == 415
        assert response.json()["message"] == "Invalid file."

    def test_storage_failure(self, test_client, auth_headers, mocker):
        mocker.patch(
            "backend.src.services.artifact_store.ArtifactStore.put_binary",
            return_value=False,
        )

        response = _upload(test_client, auth_headers, [("sar.dll", DLL)])

        assert response.status_code == 500
        assert response.json() == {
            "status": 500,
            "message": "Failed to store files.",
            "inserted": 0,
            "ok": False,
            "failed": ["sar.dll"],
        }
        assert test_client.get("/api/v1/latest/canary").status_code == 404
