"""Unit tests for the DI container."""

import pytest

from dependency_injector import containers

from deadlock_retry.container import container as global_container, get_container, reset_container
from deadlock_retry.models.db_helper import DatabaseHelper
from deadlock_retry.services.transaction_retry_service import TransactionRetryService


@pytest.mark.unit
class TestContainer:
    def test_get_container_returns_global(self):
        assert get_container() is global_container
        assert isinstance(get_container(), containers.Container)

    def test_retry_service_shares_process_state(self):
        """Test that the service is wired to the shared singletons."""
        container = get_container()

        service = container.transaction_retry_service()

        assert isinstance(service, TransactionRetryService)
        assert service is container.transaction_retry_service()
        assert service.policy is container.retry_policy()
        assert service.innodb_status.cache is container.diagnostic_command_cache()
        assert service.events is container.retry_event_publisher()
        assert service.policy.messages == container.retry_policy().messages

    def test_reset_container_drops_state(self):
        container = get_container()
        container.retry_policy().max_retries = 9
        container.diagnostic_command_cache().disable()

        reset_container()

        assert container.retry_policy().max_retries == 3
        assert container.diagnostic_command_cache().is_resolved is False

    def test_database_helper_uses_shared_service(self):
        container = get_container()

        helper = container.database_helper()

        assert isinstance(helper, DatabaseHelper)
        assert helper.retry_service is container.transaction_retry_service()
        assert container.db_engine() is helper.engine
        assert container.db_session_factory() is helper.session_factory
