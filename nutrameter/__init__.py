# -*- coding: utf-8 -*-
"""NutraMeter backend: meal logging, progress tracking and nutrition insights."""

__version__ = "0.1.0"
