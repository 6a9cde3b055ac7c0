# -*- coding: utf-8 -*-
"""ICPR test suite."""
