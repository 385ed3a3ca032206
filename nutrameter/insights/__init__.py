# -*- coding: utf-8 -*-
"""Insights: aggregation over the meal ledger and rule-based recommendations."""
