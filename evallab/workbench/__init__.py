"""Evaluation workbench core."""

from evallab.workbench.catalog import CatalogStore
from evallab.workbench.comparison import ComparisonExecutor, pick_winner
from evallab.workbench.repository import EvaluationRepository
from evallab.workbench.runner import RunExecutor
from evallab.workbench.selection import SelectionController, SelectionPhase
from evallab.workbench.session import Workbench, create_workbench

__all__ = [
    "CatalogStore",
    "ComparisonExecutor",
    "pick_winner",
    "EvaluationRepository",
    "RunExecutor",
    "SelectionController",
    "SelectionPhase",
    "Workbench",
    "create_workbench",
]
