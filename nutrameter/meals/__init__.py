# -*- coding: utf-8 -*-
"""Meal ledger: owner-scoped meal records."""
