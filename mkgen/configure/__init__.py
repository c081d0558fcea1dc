# SPDX-License-Identifier: MIT
"""Platform context and project file loading."""
