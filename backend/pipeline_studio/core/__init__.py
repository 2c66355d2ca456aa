# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Core utilities and shared modules for the pipeline editor.

This package contains:
- config: Configuration management
- dependencies: Application state wiring
- errors: Custom exceptions
- logging: Structured logging
"""

from pipeline_studio.core.config import get_config, Config
from pipeline_studio.core.errors import StudioError, NotFoundError, ValidationError
from pipeline_studio.core.logging import get_logger

__all__ = [
    "get_config",
    "Config",
    "StudioError",
    "NotFoundError",
    "ValidationError",
    "get_logger",
]
