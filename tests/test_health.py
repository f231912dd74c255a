from unittest.mock import patch

import pytest
from django.db import DatabaseError


@pytest.mark.django_db
def test_health_check_ok(client):
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.content == b"ok"


@pytest.mark.django_db
def test_health_check_reports_database_failure(client):
    with patch("core.views.connection") as conn:
        conn.cursor.side_effect = DatabaseError("down")
        response = client.get("/healthz")
    assert response.status_code == 503
