import logging

import pytest

from maintenance_engine.core.structured_logging import build_log_context, configure_logging


def test_build_log_context_drops_empty_values():
    context = build_log_context(
        tenant_id="t1",
        correlation_id="corr-1",
        user_id=None,
        work_order_id="",
        vendor_id="ven-1",
        operation="assign",
    )

    assert context == {
        "tenant_id": "t1",
        "correlation_id": "corr-1",
        "vendor_id": "ven-1",
        "operation": "assign",
    }


@pytest.mark.asyncio
async def test_service_logs_carry_context(service, tenant_id, user_id, caplog):
    caplog.set_level(logging.INFO, logger="maintenance_engine.services.maintenance_service")

    await service.create_work_order(
        tenant_id,
        {"property_id": "p1", "category": "general", "title": "Door", "description": "Sticks"},
        user_id,
        correlation_id="corr-42",
    )

    [record] = [r for r in caplog.records if r.getMessage().startswith("Created work order")]
    assert record.tenant_id == tenant_id
    assert record.correlation_id == "corr-42"
    assert record.operation == "create"


def test_configure_logging_accepts_unknown_level():
    assert configure_logging("not-a-level") is None
