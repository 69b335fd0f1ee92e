"""
Department Route Tests

Listing is open to any signed-in caller; creation needs canManageDepartments.
"""

import pytest
from httpx import AsyncClient

from staff_directory.api.repositories.base import DepartmentRecord


REGISTRY = {
    "name": "Registry",
    "description": "Personnel files and records",
    "icon": "folder",
    "color": "blue",
}


# ==================== Create ====================


@pytest.mark.asyncio
async def test_admin_creates_department(
    async_client: AsyncClient, admin_user, admin_headers, repos
):
    """Test an admin can create a department and the creation is logged."""
    response = await async_client.post(
        "/api/v1/departments", json=REGISTRY, headers=admin_headers
    )

    assert response.status_code == 201
    data = response.json()
    assert data["name"] == "Registry"
    assert data["icon"] == "folder"
    assert data["staff_count"] == 0
    assert (await repos.departments.get_by_name("Registry")).id == data["id"]

    [entry] = await repos.access_logs.by_actor(admin_user.id)
    assert entry.action == "DEPARTMENT_CREATED"
    assert entry.subject_id is None
    assert entry.details == {"department": "Registry"}


@pytest.mark.asyncio
async def test_hr_cannot_create_department(async_client: AsyncClient, hr_headers, repos):
    """Test hr lacks canManageDepartments."""
    response = await async_client.post(
        "/api/v1/departments", json=REGISTRY, headers=hr_headers
    )

    assert response.status_code == 403
    assert response.json()["detail"] == "Permission denied: canManageDepartments"
    assert await repos.departments.list_all() == []
    assert len(repos.access_logs) == 0


@pytest.mark.asyncio
async def test_duplicate_department(async_client: AsyncClient, admin_headers, repos):
    """Test a second department with the same name is rejected."""
    first = await async_client.post("/api/v1/departments", json=REGISTRY, headers=admin_headers)
    assert first.status_code == 201

    response = await async_client.post(
        "/api/v1/departments", json={"name": "Registry"}, headers=admin_headers
    )

    assert response.status_code == 400
    assert response.json()["detail"] == "Department already exists"
    assert len(await repos.departments.list_all()) == 1


@pytest.mark.asyncio
async def test_create_defaults(async_client: AsyncClient, admin_headers):
    """Test icon and color fall back to defaults."""
    response = await async_client.post(
        "/api/v1/departments", json={"name": "Finance"}, headers=admin_headers
    )

    assert response.status_code == 201
    assert response.json()["icon"] == "users"
    assert response.json()["color"] == "gray"
    assert response.json()["description"] is None


@pytest.mark.asyncio
async def test_create_requires_name(async_client: AsyncClient, admin_headers):
    response = await async_client.post(
        "/api/v1/departments", json={"name": ""}, headers=admin_headers
    )

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_create_requires_login(async_client: AsyncClient, repos):
    response = await async_client.post("/api/v1/departments", json=REGISTRY)

    assert response.status_code == 401
    assert await repos.departments.list_all() == []


# ==================== List ====================


@pytest.mark.asyncio
async def test_viewer_lists_departments(
    async_client: AsyncClient, viewer_headers, staff_member, unprotected_member, repos
):
    """Test any signed-in role can list, with headcounts from staff records."""
    await repos.departments.add(DepartmentRecord(id=None, name="Registry"))
    await repos.departments.add(DepartmentRecord(id=None, name="Finance"))
    await repos.departments.add(DepartmentRecord(id=None, name="Archives"))

    response = await async_client.get("/api/v1/departments", headers=viewer_headers)

    assert response.status_code == 200
    counts = {d["name"]: d["staff_count"] for d in response.json()}
    assert counts == {"Archives": 0, "Finance": 1, "Registry": 1}
    assert [d["name"] for d in response.json()] == ["Archives", "Finance", "Registry"]


@pytest.mark.asyncio
async def test_list_requires_login(async_client: AsyncClient):
    response = await async_client.get("/api/v1/departments")

    assert response.status_code == 401
