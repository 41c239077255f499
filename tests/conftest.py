# tests/conftest.py
import json

import pytest

from sqlgate.gate_policy import GatePolicy, policy_to_dict


@pytest.fixture
def policy():
    return GatePolicy()


@pytest.fixture
def write_policy(tmp_path):
    """
    Write a policy document to a temp file and return its path.
    Accepts a GatePolicy or a raw dict (to test malformed artifacts).
    """
    def _write(doc, name="policy.json"):
        if isinstance(doc, GatePolicy):
            doc = policy_to_dict(doc)
        path = tmp_path / name
        path.write_text(json.dumps(doc), encoding="utf-8")
        return path

    return _write
