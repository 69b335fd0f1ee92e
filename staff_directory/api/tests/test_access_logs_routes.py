"""
Access Log Route Tests

Reading the audit trail requires canViewAuditLogs.
"""

import pytest
from httpx import AsyncClient

from staff_directory.api.access.audit import AccessAction, AccessAuditLog


@pytest.fixture(scope="function")
def audit_log(repos, clock) -> AccessAuditLog:
    """Audit log writing to the app's repositories."""
    return AccessAuditLog(repos.access_logs, clock=clock)


@pytest.mark.asyncio
async def test_recent_entries(async_client: AsyncClient, hr_headers, audit_log, clock):
    """Test the default page is the ten newest entries."""
    for i in range(12):
        await audit_log.record(AccessAction.PIN_VERIFICATION_FAILED, subject_id=i)
        clock.advance(seconds=1)

    response = await async_client.get("/api/v1/access-logs", headers=hr_headers)

    assert response.status_code == 200
    body = response.json()
    assert len(body) == 10
    assert [e["subject_id"] for e in body[:3]] == [11, 10, 9]


@pytest.mark.asyncio
async def test_filter_by_staff(async_client: AsyncClient, admin_headers, audit_log):
    """Test filtering by staff record."""
    await audit_log.record(AccessAction.STAFF_CREATED, actor_id=1, subject_id=5)
    await audit_log.record(AccessAction.STAFF_UPDATED, actor_id=1, subject_id=6)
    await audit_log.record(AccessAction.STAFF_DELETED, actor_id=1, subject_id=5)

    response = await async_client.get(
        "/api/v1/access-logs", params={"staff_id": 5}, headers=admin_headers
    )

    assert response.status_code == 200
    assert [e["action"] for e in response.json()] == ["STAFF_DELETED", "STAFF_CREATED"]


@pytest.mark.asyncio
async def test_filter_by_actor_with_limit(async_client: AsyncClient, admin_headers, audit_log):
    """Test filtering by actor and paging."""
    for _ in range(4):
        await audit_log.record(AccessAction.LOGIN_SUCCESS, actor_id=7)
    await audit_log.record(AccessAction.LOGIN_SUCCESS, actor_id=8)

    response = await async_client.get(
        "/api/v1/access-logs", params={"actor_id": 7, "limit": 3}, headers=admin_headers
    )

    assert response.status_code == 200
    body = response.json()
    assert len(body) == 3
    assert all(e["actor_id"] == 7 for e in body)


@pytest.mark.asyncio
async def test_limit_bounds(async_client: AsyncClient, admin_headers):
    """Test page size limits."""
    too_big = await async_client.get(
        "/api/v1/access-logs", params={"limit": 1000}, headers=admin_headers
    )
    zero = await async_client.get(
        "/api/v1/access-logs", params={"limit": 0}, headers=admin_headers
    )

    assert too_big.status_code == 422
    assert zero.status_code == 422


@pytest.mark.asyncio
async def test_viewer_cannot_read(async_client: AsyncClient, viewer_headers):
    """Test viewers cannot read the trail."""
    response = await async_client.get("/api/v1/access-logs", headers=viewer_headers)

    assert response.status_code == 403
    assert response.json()["detail"] == "Permission denied: canViewAuditLogs"


@pytest.mark.asyncio
async def test_anonymous_cannot_read(async_client: AsyncClient):
    """Test the trail is not public."""
    response = await async_client.get("/api/v1/access-logs")
    assert response.status_code == 401
