from pathlib import Path

import pytest
import yaml

from smartbuild.core.errors import ModelFormatError, ModelNotFound
from smartbuild.core.model.graph import Packaging
from smartbuild.core.model.yaml_graph import YamlModelGraph, load_model


MODEL = {
    "name": "Plant",
    "blocks": [
        {"name": "In", "type": "Inport"},
        {"name": "K", "type": "Constant", "value": "Gain"},
        {
            "name": "Step",
            "type": "SubSystem",
            "atomic": True,
            "blocks": [{"name": "Bias", "type": "Constant", "value": "0.5", "output_type": "single"}],
        },
        {"name": "Log", "type": "SubSystem", "blocks": []},
    ],
}


def test_node_ids_are_block_paths_in_document_order():
    g = YamlModelGraph(MODEL)
    assert [n.node_id for n in g.iter_nodes()] == [
        "Plant/In",
        "Plant/K",
        "Plant/Step",
        "Plant/Step/Bias",
        "Plant/Log",
    ]
    consts = g.constant_nodes()
    assert [n.node_id for n in consts] == ["Plant/K", "Plant/Step/Bias"]
    assert consts[0].declared_output_type == "double"
    assert consts[1].declared_output_type == "single"


def test_atomic_subsystems_only():
    g = YamlModelGraph(MODEL)
    subs = g.atomic_subsystems()
    assert [s.subsystem_id for s in subs] == ["Plant/Step"]
    assert subs[0].function_name is None
    assert subs[0].packaging is None


def test_set_function_packaging_marks_dirty():
    g = YamlModelGraph(yaml.safe_load(yaml.safe_dump(MODEL)))
    g.set_function_packaging("Plant/Step", packaging=Packaging.NONREUSABLE, function_name="step_fn")
    ref = g.get_function_packaging("Plant/Step")
    assert ref.packaging == Packaging.NONREUSABLE
    assert ref.function_name == "step_fn"
    assert g.dirty is True


def test_packaging_on_non_subsystem_is_rejected():
    g = YamlModelGraph(MODEL)
    with pytest.raises(KeyError):
        g.get_function_packaging("Plant/K")


def test_duplicate_paths_and_unnamed_blocks_are_format_errors():
    with pytest.raises(ModelFormatError):
        YamlModelGraph({"name": "M", "blocks": [{"name": "A"}, {"name": "A"}]})
    with pytest.raises(ModelFormatError):
        YamlModelGraph({"name": "M", "blocks": [{"type": "Constant"}]})
    with pytest.raises(ModelFormatError):
        YamlModelGraph({"name": "M", "blocks": {"A": {}}})


def test_unknown_packaging_is_format_error():
    g = YamlModelGraph({"name": "M", "blocks": [{"name": "S", "type": "SubSystem", "atomic": True, "packaging": "Weird"}]})
    with pytest.raises(ModelFormatError):
        g.atomic_subsystems()


def test_load_and_save(tmp_path: Path):
    models = tmp_path / "models"
    models.mkdir()
    (models / "plant.yaml").write_text(yaml.safe_dump(MODEL, sort_keys=False), encoding="utf-8")

    g = load_model("plant", [models])
    assert g.name == "Plant"
    assert g.source == models / "plant.yaml"

    g.set_output_type("Plant/K", "int32")
    g.save()
    assert g.dirty is False

    again = load_model("plant", [models])
    assert again.get_output_type("Plant/K") == "int32"


def test_missing_model(tmp_path: Path):
    with pytest.raises(ModelNotFound) as ei:
        load_model("absent", [tmp_path])
    assert len(ei.value.searched) == 3


def test_unparseable_model_file(tmp_path: Path):
    (tmp_path / "bad.yaml").write_text("blocks: [unclosed\n", encoding="utf-8")
    with pytest.raises(ModelFormatError):
        load_model("bad", [tmp_path])
