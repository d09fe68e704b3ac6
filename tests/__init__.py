"""Test suite for the embulk-dsl package.

This package contains unit and integration tests validating
tokenizing, parsing, interpretation, event dispatch and
configuration loading of DSL configuration files.
"""
