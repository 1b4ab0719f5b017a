async def test_health_reports_disabled_integrations(client):
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "Healthy"
    # No courier keys or pixel id are configured in the test environment
    assert data["features"]["courier"] is False
    assert data["features"]["pixel"] is False
    assert data["features"]["ledger_write_fallback"] is False
