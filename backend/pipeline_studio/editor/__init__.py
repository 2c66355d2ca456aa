# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Editing surface: selection/edit funnel and canvas translation.
"""

from .canvas import CanvasAdapter, CanvasView, GestureRejected, VisualEdge, VisualNode, minimap_color
from .controller import EditingController

__all__ = [
    "CanvasAdapter",
    "CanvasView",
    "GestureRejected",
    "VisualEdge",
    "VisualNode",
    "minimap_color",
    "EditingController",
]
