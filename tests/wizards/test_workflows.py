# -*- coding: utf-8 -*-
"""
Tests for the concrete workflows.

Each workflow is driven through its WizardController with a fake gateway.
"""

from unittest.mock import AsyncMock

import pytest

from controllers.wizard_controller import WorkflowPhase
from services.exceptions import ConfigurationError, ValidationException
from wizards import WORKFLOWS, create_wizard
from wizards import asset_intake, asset_transfer, maintenance, purchase_order, user_provisioning


@pytest.fixture
def gateway():
    gateway = AsyncMock()
    gateway.create.return_value = {"id": "NEW-1"}
    return gateway


class TestRegistry:

    def test_all_workflows_build(self, gateway, sink):
        for name in WORKFLOWS:
            wizard = create_wizard(name, gateway=gateway, notifier=sink)
            assert wizard.step_index == 0
            assert len(wizard.steps) >= 2

    def test_unknown_workflow(self):
        with pytest.raises(ConfigurationError):
            create_wizard("scrap_disposal")


class TestAssetIntake:

    def test_basic_step_requires_fields(self, gateway, sink):
        wizard = asset_intake.create_wizard(gateway=gateway, notifier=sink)
        assert wizard.next() is False
        assert set(wizard.errors) == {"name", "category", "manufacturer"}

    def test_details_validation(self, gateway, sink):
        wizard = asset_intake.create_wizard(gateway=gateway, notifier=sink)
        wizard.update_fields({"name": "Dell XPS 15", "category": "IT Equipment",
                              "manufacturer": "Dell"})
        assert wizard.next()

        wizard.update_fields({
            "location": "IT Department - Floor 2",
            "purchase_value": "-5",
            "purchase_date": "2024-03-01",
            "warranty_expiry": "2023-03-01",
        })

        assert wizard.next() is False
        assert set(wizard.errors) == {"purchase_value", "warranty_expiry"}

    @pytest.mark.asyncio
    async def test_submit_payload(self, gateway, sink):
        wizard = asset_intake.create_wizard(gateway=gateway, notifier=sink)
        wizard.update_fields({"name": "Dell XPS 15", "category": "IT Equipment",
                              "manufacturer": "Dell"})
        wizard.next()
        wizard.update_fields({"location": "Server Room", "purchase_value": "1,250.50"})
        wizard.next()

        result = await wizard.submit()

        assert result.success
        payload = gateway.create.await_args.args[0]
        assert payload["purchase_value"] == 1250.5
        assert payload["purchase_date"] is None
        assert payload["status"] == "Active"


class TestAssetTransfer:

    CATALOG = [
        {"id": "AST-001", "location": "IT Department - Floor 2", "assigned_user": "John Employee"},
        {"id": "AST-002", "location": "Admin Office", "assigned_user": None},
    ]

    def test_selecting_asset_fills_source(self, gateway, sink):
        wizard = asset_transfer.create_wizard(self.CATALOG, gateway=gateway, notifier=sink)

        wizard.update_field("asset_id", "AST-001")
        assert wizard.values["from_location"] == "IT Department - Floor 2"
        assert wizard.values["from_user"] == "John Employee"

        wizard.update_field("from_location", "edited by hand")
        wizard.update_field("asset_id", "AST-002")
        assert wizard.values["from_location"] == "Admin Office"
        assert wizard.values["from_user"] == asset_transfer.UNASSIGNED

    def test_destination_must_differ(self, gateway, sink):
        wizard = asset_transfer.create_wizard(self.CATALOG, gateway=gateway, notifier=sink)
        wizard.update_field("asset_id", "AST-002")
        assert wizard.next()

        wizard.update_fields({"to_location": "Admin Office", "transfer_reason": "Other"})

        assert wizard.next() is False
        assert "to_location" in wizard.errors

    @pytest.mark.asyncio
    async def test_approval_status(self, gateway, sink):
        wizard = asset_transfer.create_wizard(self.CATALOG, gateway=gateway, notifier=sink)
        wizard.update_field("asset_id", "AST-001")
        wizard.next()
        wizard.update_fields({"to_location": "Warehouse", "transfer_reason": "Other",
                              "requires_approval": True})
        wizard.next()

        await wizard.submit()

        assert gateway.create.await_args.args[0]["status"] == "pending_approval"


class TestMaintenance:

    def test_recurring_frequency_follows_flag(self, gateway, sink):
        wizard = maintenance.create_wizard(gateway=gateway, notifier=sink)

        wizard.update_field("is_recurring", True)
        assert wizard.values["recurring_frequency"] == maintenance.DEFAULT_FREQUENCY

        wizard.update_field("is_recurring", False)
        assert wizard.values["recurring_frequency"] is None

    def test_schedule_validation(self, gateway, sink):
        wizard = maintenance.create_wizard(gateway=gateway, notifier=sink)
        wizard.update_fields({"asset_id": "AST-001", "maintenance_type": "Preventive"})
        assert wizard.next()

        wizard.update_field("estimated_hours", 0)

        assert wizard.next() is False
        assert set(wizard.errors) == {"scheduled_date", "estimated_hours"}

    def test_parts_helpers(self):
        parts = maintenance.add_part([], " Filter ")
        parts = maintenance.add_part(parts, "Filter")
        parts = maintenance.add_part(parts, "Belt")
        assert parts == ["Filter", "Belt"]
        assert maintenance.remove_part(parts, "Filter") == ["Belt"]


class TestPurchaseOrder:

    def test_totals_from_line_items(self, gateway, sink):
        wizard = purchase_order.create_wizard(gateway=gateway, notifier=sink)

        wizard.update_field("items", [
            {"quantity": 2, "unit_price": 100},
            {"quantity": 1, "unit_price": 50},
        ])

        values = wizard.values
        assert values["subtotal"] == 250
        assert values["tax"] == 45.0
        assert values["total"] == 295.0

    def test_add_and_remove_line_items(self, gateway, sink):
        wizard = purchase_order.create_wizard(gateway=gateway, notifier=sink)

        laptop = purchase_order.add_line_item(wizard, "Laptop", 2, 100)
        purchase_order.add_line_item(wizard, "Mouse", 1, 50)
        assert wizard.values["total"] == 295.0

        assert purchase_order.remove_line_item(wizard, laptop.item_id) is True
        assert wizard.values["subtotal"] == 50
        assert wizard.values["total"] == 59.0
        assert purchase_order.remove_line_item(wizard, "missing") is False

    def test_line_item_requires_description(self, gateway, sink):
        wizard = purchase_order.create_wizard(gateway=gateway, notifier=sink)
        with pytest.raises(ValidationException):
            purchase_order.add_line_item(wizard, "   ", 1, 10)
        assert wizard.values["items"] == []

    def test_default_terms(self, gateway, sink):
        wizard = purchase_order.create_wizard(gateway=gateway, notifier=sink)
        assert wizard.values["terms"] == "Net 30"

    @pytest.mark.asyncio
    async def test_items_step_gates_submit(self, gateway, sink):
        wizard = purchase_order.create_wizard(gateway=gateway, notifier=sink)
        wizard.update_field("vendor", "Office Plus Supplies")
        assert wizard.next()

        result = await wizard.submit()

        assert result.success is False
        assert wizard.errors == {"items": "Please add at least one item"}
        gateway.create.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_submit_payload(self, gateway, sink):
        wizard = purchase_order.create_wizard(gateway=gateway, notifier=sink)
        wizard.update_field("vendor", "Office Plus Supplies")
        wizard.next()
        purchase_order.add_line_item(wizard, "Laptop", 2, 100)

        result = await wizard.submit()

        assert result.success
        assert wizard.phase == WorkflowPhase.SUBMITTED
        payload = gateway.create.await_args.args[0]
        assert payload["items"][0]["total"] == 200
        assert payload["total"] == 236.0


class TestUserProvisioning:

    def test_email_validation(self, gateway, sink):
        wizard = user_provisioning.create_wizard(gateway=gateway, notifier=sink)
        wizard.update_fields({"name": "Raj Patel", "email": "raj.example.com"})

        assert wizard.next() is False
        assert wizard.errors == {"email": "Valid email is required"}

    def test_role_sets_permission_template(self, gateway, sink):
        wizard = user_provisioning.create_wizard(gateway=gateway, notifier=sink)

        wizard.update_field("role", "Admin")
        assert wizard.values["permissions"]["settings"]["delete"] is True

        wizard.update_field("role", "Vendor")
        assert wizard.values["permissions"] == user_provisioning.DEFAULT_PERMISSIONS

    def test_customised_permission(self, gateway, sink):
        wizard = user_provisioning.create_wizard(gateway=gateway, notifier=sink)
        user_provisioning.set_permission(wizard, "reports", "write", True)

        assert wizard.values["permissions"]["reports"]["write"] is True
        assert user_provisioning.PERMISSION_TEMPLATES["Auditor"]["reports"]["write"] is False

    @pytest.mark.asyncio
    async def test_failed_create_can_be_retried(self, gateway, sink):
        gateway.create.side_effect = [RuntimeError("down"), {"id": "U-7"}]
        wizard = user_provisioning.create_wizard(gateway=gateway, notifier=sink)
        wizard.update_fields({"name": "Raj Patel", "email": "raj@example.com"})
        wizard.next()
        wizard.update_field("department", "HR")
        wizard.next()

        assert (await wizard.submit()).success is False
        assert wizard.phase == WorkflowPhase.FAILED
        result = await wizard.submit()

        assert result.success
        assert result.data == {"id": "U-7"}
        assert "employee_id" not in gateway.create.await_args.args[0]
