# SPDX-License-Identifier: MIT
"""Project model, source classification, flags and link resolution."""
