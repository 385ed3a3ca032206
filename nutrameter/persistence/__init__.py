# -*- coding: utf-8 -*-
"""Persistence: durable SQLite store, in-memory fallback store and the gateway between them."""
