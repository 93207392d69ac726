# -*- coding: utf-8 -*-
"""
Asset Console Workflows
=======================
Each workflow is only a StepSpec list, its dependency rules and a commit
function; the step gating itself lives in WizardController.

Usage:
    from wizards import create_wizard

    wizard = create_wizard("purchase_order", coordinator=purchase_orders)
"""

from services.exceptions import ConfigurationError

from wizards import asset_intake, asset_transfer, maintenance, purchase_order, user_provisioning

WORKFLOWS = {
    "asset_intake": asset_intake,
    "asset_transfer": asset_transfer,
    "maintenance": maintenance,
    "purchase_order": purchase_order,
    "user_provisioning": user_provisioning,
}


def create_wizard(name: str, **kwargs):
    """Build the WizardController of the named workflow."""
    module = WORKFLOWS.get(name)
    if module is None:
        raise ConfigurationError(f"Unknown workflow: {name}")
    return module.create_wizard(**kwargs)


__all__ = ["WORKFLOWS", "create_wizard"]
