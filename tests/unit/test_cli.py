"""
Unit tests for the operator CLI.
"""

import json
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from taskcycle.__main__ import _dump, build_parser, main
from taskcycle.core.exceptions import ValidationError
from taskcycle.models.lifecycle import RecurringTaskStats


def test_dispatch_arguments():
    args = build_parser().parse_args(["dispatch", "42", "delete", "--user-id", "u-1"])

    assert args.command == "dispatch"
    assert args.task_id == "42"
    assert args.operation == "delete"
    assert args.user_id == "u-1"


def test_unknown_operation_rejected():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["dispatch", "42", "archive"])


def test_dump_models():
    payload = json.loads(_dump([RecurringTaskStats(total_tasks=2)]))
    assert payload[0]["total_tasks"] == 2


def test_validation_error_exit_code(capsys):
    facade = MagicMock()
    facade.dispatch = AsyncMock(side_effect=ValidationError("userId is required for delete operation"))

    with patch("taskcycle.__main__.init_db", AsyncMock()), patch(
        "taskcycle.__main__.get_lifecycle_facade", return_value=facade
    ):
        code = main(["dispatch", "42", "delete"])

    assert code == 1
    assert "userId is required" in capsys.readouterr().err
