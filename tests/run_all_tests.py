#!/usr/bin/env python3
"""
Test runner for the Adaptive Trivia Quiz.
Runs the unit and integration suites and prints a summary report.
"""
import unittest
import sys
import time
from pathlib import Path

# Make the project root importable when run as a script
sys.path.insert(0, str(Path(__file__).parent.parent))

CATEGORIES = {
    'unit': [
        'tests.test_models',
        'tests.test_quiz_engine',
        'tests.test_player',
        'tests.test_quiz_controller',
        'tests.test_trivia_provider',
        'tests.test_data_manager',
        'tests.test_config_manager',
    ],
    'integration': ['tests.test_app', 'tests.test_integration_comprehensive'],
    'bot': ['tests.test_bot'],
    'engine': ['tests.test_quiz_engine'],
    'controller': ['tests.test_quiz_controller'],
    'provider': ['tests.test_trivia_provider', 'tests.test_data_manager'],
    'config': ['tests.test_config_manager'],
}


def load_suite(module_names):
    loader = unittest.TestLoader()
    suite = unittest.TestSuite()

    for module_name in module_names:
        try:
            suite.addTest(loader.loadTestsFromName(module_name))
            print(f"✓ Loaded tests from {module_name}")
        except Exception as e:
            print(f"✗ Failed to load {module_name}: {e}")
            return None

    return suite


def run_test_suite(module_names):
    """Run the given test modules and print a summary report."""
    print("=" * 70)
    print("Adaptive Trivia Quiz - Test Suite")
    print("=" * 70)

    suite = load_suite(module_names)
    if suite is None:
        return False

    runner = unittest.TextTestRunner(verbosity=2, stream=sys.stdout, buffer=True)

    start_time = time.time()
    result = runner.run(suite)
    end_time = time.time()

    total_tests = result.testsRun
    failures = len(result.failures)
    errors = len(result.errors)
    skipped = len(result.skipped)
    passed = total_tests - failures - errors - skipped

    print("\n" + "=" * 70)
    print("Test Summary Report")
    print("=" * 70)
    print(f"Total Tests Run: {total_tests}")
    print(f"Passed: {passed}")
    print(f"Failed: {failures}")
    print(f"Errors: {errors}")
    print(f"Skipped: {skipped}")
    print(f"Success Rate: {(passed/total_tests)*100:.1f}%" if total_tests > 0 else "N/A")
    print(f"Execution Time: {end_time - start_time:.2f} seconds")

    return failures == 0 and errors == 0


if __name__ == '__main__':
    if len(sys.argv) > 1:
        category = sys.argv[1]
        if category not in CATEGORIES:
            print(f"Unknown category: {category}")
            print(f"Available categories: {', '.join(CATEGORIES.keys())}")
            sys.exit(1)
        modules = CATEGORIES[category]
    else:
        modules = sorted({name for names in CATEGORIES.values() for name in names})

    sys.exit(0 if run_test_suite(modules) else 1)
