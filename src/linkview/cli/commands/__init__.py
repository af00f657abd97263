# Author: PB & Claude
# Maintainer: PB
# Original date: 2026.10.18
# License: (c) HRDAG, 2025, GPL-2 or newer
#
# ------
# src/linkview/cli/commands/__init__.py

"""
Command handlers for linkview CLI operations.

This package contains the business logic for all CLI commands,
separated from the CLI interface layer:

- info: Read-only commands (status, plan, show-index, validate-config)
- actions: State-changing commands (sync, watch)
"""
