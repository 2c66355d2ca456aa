# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Pipeline Studio - editor core for data-movement pipelines.

Keeps the pipeline graph consistent, renders plugin configuration forms
from catalog schemas, and orders save/execute against the backend.
"""

__version__ = "1.0.0"
