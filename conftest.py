"""
Root conftest: loads the harness fixtures and pytester for the whole suite.
"""
pytest_plugins = ['pytester', 'lambda_harness.pytest_plugin']
