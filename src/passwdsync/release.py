# Copyright (c) 2024 passwdsync Contributors
# MIT License

"""passwdsync release metadata."""

from __future__ import annotations

__version__ = "0.1.0"
__author__ = "passwdsync Contributors"
__codename__ = "Keystone"
