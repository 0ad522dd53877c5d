import numpy as np
import pytest

from layernet.core.errors import InvalidExample, SessionError
from layernet.session import Session


def test_commands_require_state():
    session = Session()
    with pytest.raises(SessionError):
        session.require_network()
    with pytest.raises(SessionError):
        session.add_example([1.0], [1.0])
    session.create_network([2, 1])
    with pytest.raises(SessionError):
        session.train_pass(0.1)


def test_add_example_checks_widths():
    session = Session(seed=0)
    session.create_network([2, 3, 1])
    session.add_example([0.1, 0.2], [1.0])
    with pytest.raises(InvalidExample):
        session.add_example([0.1], [1.0])
    with pytest.raises(InvalidExample):
        session.add_example([0.1, 0.2], [1.0, 0.0])
    assert len(session.examples) == 1


def test_train_pass_updates_network(tmp_path):
    session = Session(seed=0)
    network = session.create_network([2, 3, 1])
    session.add_example([0.0, 1.0], [1.0])
    session.add_example([1.0, 0.0], [1.0])
    before = network.weights[0].copy()
    total = session.train_pass(0.5)
    assert isinstance(total, float)
    assert not np.array_equal(before, network.weights[0])

    path = session.save(tmp_path / "data.json")
    fresh = Session()
    assert len(fresh.load(path)) == 2


def test_sessions_are_independent():
    a, b = Session(), Session()
    a.create_network([2, 1])
    assert b.network is None
    assert a.examples is not b.examples
