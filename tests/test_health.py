def test_health(client):
    """Test the health endpoint returns OK status."""
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json().get("success") is True


def test_health_response_format(client):
    """Test that health endpoint returns the envelope."""
    r = client.get("/health")
    assert r.status_code == 200
    response_data = r.json()
    assert "data" in response_data
    assert isinstance(response_data["data"], str)
    assert response_data["message"] is None
