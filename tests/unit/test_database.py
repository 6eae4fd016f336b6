"""
Unit tests for the Supabase client helpers.

Run: pytest tests/unit/test_database.py -v
"""

import pytest
from unittest.mock import MagicMock, patch

from config.database import check_connection, get_admin_client, get_supabase_client
from exceptions import DatabaseError


@pytest.fixture(autouse=True)
def clear_client_cache():
    get_supabase_client.cache_clear()
    yield
    get_supabase_client.cache_clear()


class TestGetSupabaseClient:
    """Tests for get_supabase_client()"""

    def test_client_is_cached(self):
        with patch("config.database.create_client", return_value=MagicMock()) as create:
            first = get_supabase_client()
            second = get_supabase_client()

        assert first is second
        create.assert_called_once()

    def test_failure_raises_database_error(self):
        with patch("config.database.create_client", side_effect=ValueError("bad url")):
            with pytest.raises(DatabaseError) as exc_info:
                get_supabase_client()

        assert exc_info.value.details["operation"] == "connect"


class TestGetAdminClient:
    """Tests for get_admin_client()"""

    def test_none_without_service_key(self):
        with patch("config.database.settings") as mock_settings:
            mock_settings.supabase_service_key = None
            assert get_admin_client() is None

    def test_uses_service_key(self):
        with patch("config.database.settings") as mock_settings, \
                patch("config.database.create_client", return_value="admin") as create:
            mock_settings.supabase_url = "https://test-project.supabase.co"
            mock_settings.supabase_service_key = "service-key"

            assert get_admin_client() == "admin"

        create.assert_called_once_with("https://test-project.supabase.co", "service-key")


class TestCheckConnection:
    """Tests for check_connection()"""

    def test_healthy_counts_warehouses(self, mock_db):
        mock_db.set_table_data("warehouses", [{"id": "wh-a"}, {"id": "wh-b"}])

        assert check_connection() == {"status": "healthy", "warehouses_count": 2}

    def test_unhealthy_on_query_failure(self, mock_db):
        mock_db.fail_table("warehouses", RuntimeError("socket closed"))

        result = check_connection()

        assert result["status"] == "unhealthy"
        assert result["error"] == "socket closed"
