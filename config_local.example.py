# config_local.example.py

"""
Example local overrides.

Usage:
  1) Copy this file to `config_local.py`
  2) Adjust values for your machine
  3) Never commit `config_local.py` (it is gitignored)

Prefer `.env` for secrets. This file should contain only safe overrides.
"""

# Example: run headless (scheduler only, no admin console)
# CONSOLE_ENABLED = False

# Example: never send the periodic report from this machine
# REPORT_ENABLED = False
