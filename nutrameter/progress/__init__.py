# -*- coding: utf-8 -*-
"""Progress: body-weight and water-intake samples (append-only)."""
