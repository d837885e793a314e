#!/usr/bin/env python
"""
Test runner script for the whole test suite
Usage: python manage.py test or python Doc/run_tests.py
"""
import os
import sys
from pathlib import Path

import django
from django.conf import settings
from django.test.utils import get_runner

if __name__ == "__main__":
    sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
    os.environ.setdefault('DJANGO_SETTINGS_MODULE', 'erp.config.settings')
    django.setup()
    TestRunner = get_runner(settings)
    test_runner = TestRunner()
    failures = test_runner.run_tests([
        'erp.core',
        'erp.companies',
        'erp.currencies',
        'erp.catalog',
        'erp.inventory',
        'erp.pricing',
        'erp.parties',
    ])
    sys.exit(bool(failures))
