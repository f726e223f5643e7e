"""Tests for environment variable expansion utilities."""

import os
from unittest.mock import patch

from cluster_hibernation.config.utils.env_expansion import expand_env_vars


class TestEnvironmentVariableExpansion:
    """Test environment variable expansion functionality."""

    def test_expand_simple_env_var(self):
        with patch.dict(os.environ, {"TEST_VAR": "/test/path"}):
            assert expand_env_vars("$TEST_VAR") == "/test/path"

    def test_expand_braced_env_var_with_subpath(self):
        with patch.dict(os.environ, {"TEST_VAR": "/test/path"}):
            assert expand_env_vars("${TEST_VAR}/subdir") == "/test/path/subdir"

    def test_expand_nonexistent_env_var(self):
        """Unset variables are left as written."""
        with patch.dict(os.environ, {}, clear=True):
            assert expand_env_vars("$NONEXISTENT_VAR") == "$NONEXISTENT_VAR"

    def test_default_used_when_unset(self):
        with patch.dict(os.environ, {}, clear=True):
            assert expand_env_vars("${LOG_LEVEL:debug}") == "debug"

    def test_default_ignored_when_set(self):
        with patch.dict(os.environ, {"LOG_LEVEL": "warning"}):
            assert expand_env_vars("${LOG_LEVEL:debug}") == "warning"

    def test_expand_nested_values(self):
        with patch.dict(os.environ, {"TEST_VAR": "/test/path"}):
            config = {
                "logging": {"file": {"path": "$TEST_VAR/hibernation.log"}},
                "endpoints": ["${TEST_VAR}/a", "plain"],
                "page_limit": 25,
            }
            assert expand_env_vars(config) == {
                "logging": {"file": {"path": "/test/path/hibernation.log"}},
                "endpoints": ["/test/path/a", "plain"],
                "page_limit": 25,
            }
