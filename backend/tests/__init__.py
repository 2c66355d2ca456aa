# Copyright (c) 2025 adcl.io
# All Rights Reserved.
#
# This software is proprietary and confidential. Unauthorized copying,
# distribution, or use of this software is strictly prohibited.

"""
Test Suite for the Pipeline Studio editor core

Structure:
- graph/: Graph model invariants and analysis
- forms/: Schema-driven form engine
- editor/: Selection controller and canvas adapter
- services/: Backend client, catalog and session lifecycle
- test_end_to_end.py: Full editor flows against the fake backend
"""
