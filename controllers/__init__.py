# -*- coding: utf-8 -*-
"""
Asset Console Controllers
=========================
Client-side control logic behind the console's wizards and registries.

Controllers provide:
- Standardized results via OperationResult
- Qt signals for UI updates
- Step gating, derived fields and list state
- Mutation followed by an authoritative refetch

Usage:
    from controllers import ListViewController

    view = ListViewController(fetch=assets.list_all, searchable_fields=("id", "name"))
    await view.load()
    view.set_search("AST-1002")
"""

# Base controller and result types
from controllers.base_controller import (
    BaseController,
    OperationResult,
)

from controllers.field_dependency_engine import (
    FieldDependencyEngine,
    FieldDependencyRule,
)

from controllers.mutation_coordinator import (
    OptimisticMutationCoordinator,
    ReconciliationState,
)

from controllers.wizard_controller import (
    StepSpec,
    WizardController,
    WorkflowInstance,
    WorkflowPhase,
)

from controllers.list_view_controller import (
    BulkAction,
    FilterPreset,
    ListViewController,
    SelectionState,
)

# All public exports
__all__ = [
    # Base
    "BaseController",
    "OperationResult",

    # Derived fields
    "FieldDependencyEngine",
    "FieldDependencyRule",

    # Reconciliation
    "OptimisticMutationCoordinator",
    "ReconciliationState",

    # Wizard
    "StepSpec",
    "WizardController",
    "WorkflowInstance",
    "WorkflowPhase",

    # Registries
    "BulkAction",
    "FilterPreset",
    "ListViewController",
    "SelectionState",
]
