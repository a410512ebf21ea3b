import pytest
from datetime import datetime, timezone
from decimal import Decimal
from types import SimpleNamespace
from unittest.mock import patch
from uuid import uuid4
from fastapi.testclient import TestClient

from crumbs.core.auth import (
    SessionUser,
    get_session,
    require_admin_session,
    require_user_session,
)
from crumbs.core.exceptions import DuplicateItemError, InsufficientStockError, NotFoundError, UpstreamError
from crumbs.integrations.identity import get_identity_client
from crumbs.integrations.suggestions import get_suggestion_client
from crumbs.main import app
from crumbs.models.inventory import InventoryCategory
from crumbs.schemas.admin import AdminDashboardStats, ListUsersResult
from crumbs.schemas.ai import GeneratedRecipe, MarginSuggestion
from crumbs.schemas.production import ProductionResult
from crumbs.schemas.settings import UserSettingsPayload

BUSINESS_USER = SessionUser(id="tenant-a", name="Baker", email="baker@example.com", role="user")
ADMIN_USER = SessionUser(id="admin-1", name="Admin", email="admin@example.com", role="admin")
SUPERADMIN_USER = SessionUser(id="root-1", name="Root", email="root@example.com", role="superadmin")


def _as(user):
    return lambda: user


@pytest.fixture
def client():
    app.dependency_overrides[require_user_session] = _as(BUSINESS_USER)
    app.dependency_overrides[get_identity_client] = lambda: object()
    app.dependency_overrides[get_suggestion_client] = lambda: object()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def admin_client():
    app.dependency_overrides[get_session] = _as(ADMIN_USER)
    app.dependency_overrides[get_identity_client] = lambda: object()
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def superadmin_client():
    app.dependency_overrides[get_session] = _as(SUPERADMIN_USER)
    app.dependency_overrides[get_identity_client] = lambda: object()
    yield TestClient(app)
    app.dependency_overrides.clear()


def _inventory_item(**overrides):
    now = datetime(2024, 5, 1, 9, 30, tzinfo=timezone.utc)
    item = dict(
        id=uuid4(), name="Flour", category=InventoryCategory.INGREDIENT, supplier=None,
        purchase_cost=Decimal("2.50"), purchase_quantity=Decimal("1E+3"), unit="g",
        stock=Decimal("1E+3"), unit_cost=Decimal("0.0025"), created_at=now, updated_at=now,
    )
    item.update(overrides)
    return SimpleNamespace(**item)


class TestSessions:
    def test_signed_out_caller_gets_401(self):
        app.dependency_overrides[get_session] = lambda: None
        try:
            response = TestClient(app).get("/api/v1/inventory/")
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 401
        assert response.json()["success"] is False

    def test_admin_cannot_reach_tenant_routes(self, admin_client):
        response = admin_client.get("/api/v1/recipes/")
        assert response.status_code == 403

    def test_business_user_cannot_reach_admin_routes(self):
        app.dependency_overrides[get_session] = _as(BUSINESS_USER)
        try:
            response = TestClient(app).get("/api/v1/admin/stats")
        finally:
            app.dependency_overrides.clear()
        assert response.status_code == 403


class TestInventoryRoutes:
    def test_list_renders_decimals_as_plain_strings(self, client):
        with patch('crumbs.api.v1.inventory.list_items') as mock_list:
            mock_list.return_value = [_inventory_item()]

            response = client.get("/api/v1/inventory/")

        assert response.status_code == 200
        item = response.json()["data"][0]
        assert item["stock"] == "1000"
        assert item["purchase_cost"] == "2.50"
        mock_list.assert_called_once_with("tenant-a")

    def test_create_returns_201(self, client):
        with patch('crumbs.api.v1.inventory.create_item') as mock_create:
            mock_create.return_value = _inventory_item()
            payload = {"name": "Flour", "category": "ingredient", "purchase_cost": "2.50",
                       "purchase_quantity": "1000", "unit": "g"}

            response = client.post("/api/v1/inventory/", json=payload)

        assert response.status_code == 201
        assert response.json()["data"]["name"] == "Flour"

    def test_create_rejects_zero_purchase_quantity(self, client):
        payload = {"name": "Flour", "category": "ingredient", "purchase_cost": "2.50",
                   "purchase_quantity": "0", "unit": "g"}

        response = client.post("/api/v1/inventory/", json=payload)

        assert response.status_code == 422
        assert response.json()["error"]["code"] == "validation_error"

    def test_duplicate_returns_409(self, client):
        with patch('crumbs.api.v1.inventory.create_item') as mock_create:
            mock_create.side_effect = DuplicateItemError('Item "Flour" with unit "g" already exists.')
            payload = {"name": "Flour", "category": "ingredient", "purchase_cost": "2.50",
                       "purchase_quantity": "1000", "unit": "g"}

            response = client.post("/api/v1/inventory/", json=payload)

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "duplicate_item"

    def test_add_stock_requires_positive_quantity(self, client):
        response = client.post(f"/api/v1/inventory/{uuid4()}/stock", json={"quantity_to_add": "-5"})
        assert response.status_code == 422

    def test_unknown_item_returns_404(self, client):
        with patch('crumbs.api.v1.inventory.get_item') as mock_get:
            mock_get.side_effect = NotFoundError("Inventory item not found")

            response = client.get(f"/api/v1/inventory/{uuid4()}")

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "not_found"


class TestRecipeRoutes:
    def test_margin_of_100_is_rejected(self, client):
        response = client.patch(f"/api/v1/recipes/{uuid4()}", json={"target_margin": "100"})
        assert response.status_code == 422

    def test_create_without_items_is_rejected(self, client):
        response = client.post("/api/v1/recipes/", json={"name": "Bread", "items": []})
        assert response.status_code == 422

    def test_delete(self, client):
        recipe_id = uuid4()
        with patch('crumbs.api.v1.recipes.delete_recipe') as mock_delete:
            response = client.delete(f"/api/v1/recipes/{recipe_id}")

        assert response.status_code == 200
        assert response.json()["data"]["id"] == str(recipe_id)
        mock_delete.assert_called_once_with("tenant-a", recipe_id)


class TestProductionRoutes:
    def test_batch_success(self, client):
        log_id = uuid4()
        with patch('crumbs.api.v1.production.execute_production_batch') as mock_batch:
            mock_batch.return_value = ProductionResult(success=True, log_ids=[log_id])

            response = client.post("/api/v1/production/batches",
                                   json={"items": [{"recipe_id": str(uuid4()), "quantity": 2}]})

        assert response.status_code == 201
        assert response.json()["data"] == {"success": True, "log_ids": [str(log_id)]}

    def test_batch_with_insufficient_stock_returns_409(self, client):
        with patch('crumbs.api.v1.production.execute_production_batch') as mock_batch:
            mock_batch.side_effect = InsufficientStockError("Flour", Decimal("1200"), Decimal("1000"), "g")

            response = client.post("/api/v1/production/batches",
                                   json={"items": [{"recipe_id": str(uuid4()), "quantity": 3}]})

        assert response.status_code == 409
        error = response.json()["error"]
        assert error["code"] == "insufficient_stock"
        assert error["message"] == 'Insufficient stock for "Flour": need 1200 g, have 1000 g'
        assert error["details"]["required"] == "1200"

    @pytest.mark.parametrize("items", [[], [{"recipe_id": "not-a-uuid", "quantity": 1}],
                                       [{"recipe_id": "6b4a2c1e-0000-4000-8000-000000000000", "quantity": 0}],
                                       [{"recipe_id": "6b4a2c1e-0000-4000-8000-000000000000", "quantity": 1.5}]])
    def test_batch_validation(self, client, items):
        response = client.post("/api/v1/production/batches", json={"items": items})
        assert response.status_code == 422

    def test_undo(self, client):
        log_id = uuid4()
        with patch('crumbs.api.v1.production.undo_production') as mock_undo:
            response = client.delete(f"/api/v1/production/logs/{log_id}")

        assert response.status_code == 200
        mock_undo.assert_called_once_with("tenant-a", log_id)


class TestSettingsRoutes:
    def test_update_rejects_bad_vat(self, client):
        response = client.put("/api/v1/settings/", json={"vat_rate": "150", "currency": "EUR"})
        assert response.status_code == 422

    def test_get(self, client):
        with patch('crumbs.api.v1.settings.get_settings') as mock_get:
            mock_get.return_value = UserSettingsPayload(vat_rate="20", currency="EUR")

            response = client.get("/api/v1/settings/")

        assert response.json()["data"] == {"vat_rate": "20", "currency": "EUR"}


class TestAIRoutes:
    def test_generate_recipe(self, client):
        with patch('crumbs.api.v1.ai.generate_recipe') as mock_generate:
            mock_generate.return_value = GeneratedRecipe(name="Cookies", instructions="1. Bake", ingredients=[], others=[])

            response = client.post("/api/v1/ai/recipe")

        assert response.status_code == 200
        assert response.json()["data"]["name"] == "Cookies"

    def test_margin_suggestion(self, client):
        with patch('crumbs.api.v1.ai.suggest_margin') as mock_suggest:
            mock_suggest.return_value = MarginSuggestion(suggested_margin=Decimal("35"), reasoning="Typical.")

            response = client.post("/api/v1/ai/margin", json={"name": "Cookies", "total_cost": "0.75"})

        assert response.json()["data"]["suggested_margin"] == "35"

    def test_provider_failure_returns_502(self, client):
        with patch('crumbs.api.v1.ai.suggest_margin') as mock_suggest:
            mock_suggest.side_effect = UpstreamError("AI provider returned 503", upstream_status=503)

            response = client.post("/api/v1/ai/margin", json={"name": "Cookies", "total_cost": "0.75"})

        assert response.status_code == 502
        assert response.json()["error"]["code"] == "upstream_error"
        assert "503" not in response.json()["error"]["message"]


class TestAdminRoutes:
    def test_list_users(self, admin_client):
        with patch('crumbs.services.admin_service.list_users') as mock_list:
            mock_list.return_value = ListUsersResult(users=[], total=0)

            response = admin_client.get("/api/v1/admin/users?limit=10&searchValue=ann&role=user")

        assert response.status_code == 200
        query = mock_list.call_args.args[1]
        assert (query.limit, query.search_value, query.filter_role.value) == (10, "ann", "user")

    def test_list_users_limit_is_bounded(self, admin_client):
        response = admin_client.get("/api/v1/admin/users?limit=5000")
        assert response.status_code == 422

    def test_admin_cannot_ban_self(self, admin_client):
        response = admin_client.post("/api/v1/admin/users/admin-1/ban", json={})
        assert response.status_code == 400

    def test_delete_user(self, admin_client):
        with patch('crumbs.services.admin_service.delete_user') as mock_delete:
            response = admin_client.delete("/api/v1/admin/users/tenant-a")

        assert response.status_code == 200
        assert mock_delete.call_args.args[1] == "tenant-a"

    def test_only_superadmin_creates_admins(self, admin_client):
        payload = {"name": "Ann", "email": "ann@example.com", "password": "s3cretpass"}
        response = admin_client.post("/api/v1/admin/admins", json=payload)
        assert response.status_code == 403

    def test_superadmin_creates_admin(self, superadmin_client):
        with patch('crumbs.services.admin_service.create_admin') as mock_create:
            mock_create.return_value = {"user": {"id": "new-admin"}}
            payload = {"name": "Ann", "email": "ann@example.com", "password": "s3cretpass"}

            response = superadmin_client.post("/api/v1/admin/admins", json=payload)

        assert response.status_code == 201
        assert response.json()["data"]["user"]["id"] == "new-admin"

    def test_stats_for_superadmin(self, superadmin_client):
        with patch('crumbs.services.admin_service.get_dashboard_stats') as mock_stats:
            mock_stats.return_value = AdminDashboardStats(
                total_users=3, active_users=2, banned_users=1, verified_users=2,
                total_accounts=5, total_admins=1, active_accounts=3, banned_accounts=2,
            )

            response = superadmin_client.get("/api/v1/admin/stats")

        assert response.json()["data"]["total_accounts"] == 5
        assert mock_stats.call_args.args[1] is True

    def test_stats_hide_account_totals_from_admins(self, admin_client):
        with patch('crumbs.services.admin_service.get_dashboard_stats') as mock_stats:
            mock_stats.return_value = AdminDashboardStats(total_users=3, active_users=2, banned_users=1, verified_users=2)

            response = admin_client.get("/api/v1/admin/stats")

        assert "total_accounts" not in response.json()["data"]
        assert mock_stats.call_args.args[1] is False
