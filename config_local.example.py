# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env` for secrets. This file should contain only safe overrides.
Supported names: CONSOLE_ENABLED, MATRIX_ENABLED, CONSOLE_USER_ID.
"""

# Example: run only the Matrix bot
# CONSOLE_ENABLED = False
# MATRIX_ENABLED = True

# Example: keep your console tasks under your Matrix id
# CONSOLE_USER_ID = "@me:example.org"
