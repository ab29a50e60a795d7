"""Nash Cards — Screen Workflow"""

from nashcards.workflow.controller import WorkflowController
from nashcards.workflow.ports import UIPort
from nashcards.workflow.screens import PROTECTED_SCREENS, Screen

__all__ = ["PROTECTED_SCREENS", "Screen", "UIPort", "WorkflowController"]
