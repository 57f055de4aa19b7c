"""Fixtures shared by the API tests."""

import pytest


@pytest.fixture
def import_csv(client):
    """POST CSV text to the import endpoint; commits unless told otherwise."""

    def _import(text, expected_status=200, **body):
        body.setdefault("dryRun", False)
        response = client.post("/api/imports/transactions", json={"csv": text, **body})
        assert response.status_code == expected_status, response.text
        return response.json()

    return _import
