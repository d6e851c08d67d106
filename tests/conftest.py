import pytest

from bonomen.models import CriticalProcessRule, ProcessSnapshot, RuleSet


@pytest.fixture
def svchost_rules() -> RuleSet:
    return RuleSet([CriticalProcessRule("svchost", 1, frozenset({"/usr/bin/svchost"}))])


@pytest.fixture
def scenario_snapshots():
    return [
        ProcessSnapshot("scvhost", "/tmp/evil/scvhost"),
        ProcessSnapshot("svchost", "/usr/bin/svchost"),
        ProcessSnapshot("notepad", "/usr/bin/notepad"),
    ]


@pytest.fixture
def rules_file(tmp_path):
    def write(text: str):
        path = tmp_path / "procs.txt"
        path.write_text(text)
        return path
    return write
