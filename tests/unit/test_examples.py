import json

import numpy as np
import pytest

from layernet.core.errors import InvalidExample
from layernet.data.examples import TrainingExample, TrainingSet
from layernet.data.persistence import load_examples, save_examples


@pytest.mark.parametrize(
    "inputs, target",
    [
        ([], [1.0]),
        ([1.0], []),
        ([float("nan")], [1.0]),
        ([1.0], [float("inf")]),
        ([[1.0, 2.0]], [1.0]),
        (["a"], [1.0]),
    ],
)
def test_invalid_examples_are_rejected_at_construction(inputs, target):
    with pytest.raises(InvalidExample):
        TrainingExample(inputs, target)


def test_example_vectors_are_immutable():
    example = TrainingExample([1, 2], [0.5])
    assert example.input.dtype == np.float64
    with pytest.raises(ValueError):
        example.input[0] = 3.0
    with pytest.raises(AttributeError):
        example.input = np.array([0.0])  # type: ignore[misc]


def test_example_does_not_alias_caller_data():
    source = np.array([1.0, 2.0])
    example = TrainingExample(source, [0.0])
    source[0] = 9.0
    assert example.input[0] == 1.0


def test_record_fields():
    example = TrainingExample([0.1, 0.2], [1.0])
    assert example.to_record() == {"Input": [0.1, 0.2], "Target": [1.0]}
    assert TrainingExample.from_record(example.to_record()) == example
    with pytest.raises(InvalidExample, match="Target"):
        TrainingExample.from_record({"Input": [1.0]})


def test_training_set_ordering_and_compatibility():
    examples = TrainingSet()
    examples.add([0.0, 1.0], [1.0])
    examples.append(TrainingExample([1.0, 1.0], [0.0]))
    assert len(examples) == 2
    assert [float(e.target[0]) for e in examples] == [1.0, 0.0]
    assert examples[1].input.tolist() == [1.0, 1.0]
    examples.check_compatible(2, 1)
    with pytest.raises(InvalidExample, match="inputs"):
        examples.check_compatible(3, 1)
    with pytest.raises(InvalidExample, match="targets"):
        examples.check_compatible(2, 2)
    with pytest.raises(TypeError):
        examples.append(([0.0], [1.0]))  # type: ignore[arg-type]
    examples.clear()
    assert len(examples) == 0


def test_save_and_load_examples(tmp_path):
    examples = TrainingSet.from_records(
        [{"Input": [1.0, 2.0], "Target": [0.3, 0.4]}, {"Input": [3.0, 4.0], "Target": [0.5, 0.6]}]
    )
    path = save_examples(examples, tmp_path / "nested" / "data.json")

    text = path.read_text()
    assert '\n  {\n    "Input"' in text
    assert json.loads(text)[1] == {"Input": [3.0, 4.0], "Target": [0.5, 0.6]}

    loaded = load_examples(path)
    assert len(loaded) == 2
    assert loaded[0] == examples[0]


def test_load_examples_rejects_bad_files(tmp_path):
    bad_shape = tmp_path / "object.json"
    bad_shape.write_text('{"Input": [1.0], "Target": [1.0]}')
    with pytest.raises(InvalidExample):
        load_examples(bad_shape)

    bad_values = tmp_path / "nan.json"
    bad_values.write_text('[{"Input": [NaN], "Target": [1.0]}]')
    with pytest.raises(InvalidExample):
        load_examples(bad_values)

    with pytest.raises(FileNotFoundError):
        load_examples(tmp_path / "missing.json")
