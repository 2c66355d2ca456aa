# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Services talking to the backend: HTTP client, plugin catalog, and the
pipeline session lifecycle.
"""

from .backend_client import BackendClient
from .catalog_service import PluginCatalog
from .session_service import PipelineSession, SessionState

__all__ = [
    "BackendClient",
    "PluginCatalog",
    "PipelineSession",
    "SessionState",
]
