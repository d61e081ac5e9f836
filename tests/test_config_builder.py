from pathlib import Path

import pytest

from smartbuild.core.config import (
    BuildPolicy,
    build_configuration,
    compute_storage_layout,
    derive_function_name,
)
from smartbuild.core.errors import ConfigurationError, SolverConfigurationError, UnknownTargetDevice
from smartbuild.core.model.graph import Packaging
from smartbuild.core.model.yaml_graph import YamlModelGraph
from smartbuild.core.symbols.loader import execute_dictionary
from smartbuild.core.symbols.models import StorageClass
from smartbuild.core.symbols.storage import resolve_storage_classes
from smartbuild.core.targets import TargetRegistry


DICT = (
    "Threshold = Parameter(192, data_type='int32')\n"
    "Level = Signal(data_type='uint16', storage_class='ImportedExternPointer', identifier='bsp_level')\n"
    "Scratch = Signal(data_type='single')\n"
    "Cmd = Signal(data_type='boolean', storage_class='ExportedGlobal')\n"
)


def _model():
    return YamlModelGraph(
        {
            "name": "Plant",
            "blocks": [
                {"name": "Control Loop", "type": "SubSystem", "atomic": True, "blocks": []},
                {"name": "Named", "type": "SubSystem", "atomic": True, "function_name": "named_fn"},
                {"name": "Plain", "type": "SubSystem", "blocks": []},
            ],
        }
    )


def _table():
    t = execute_dictionary(DICT)
    resolve_storage_classes(t)
    return t


def _build(tmp_path: Path, policy: BuildPolicy, graph=None):
    return build_configuration(
        table=_table(),
        graph=graph or _model(),
        policy=policy,
        targets=TargetRegistry(),
        project_root=tmp_path,
    )


def test_atomic_subsystems_get_nonreusable_packaging_and_names(tmp_path: Path):
    graph = _model()
    cfg = _build(tmp_path, BuildPolicy(), graph)

    assert set(cfg.subsystem_bindings) == {"Plant/Control Loop", "Plant/Named"}
    loop = cfg.subsystem_bindings["Plant/Control Loop"]
    assert loop.packaging == Packaging.NONREUSABLE
    assert loop.function_name == "Control_Loop"
    assert cfg.subsystem_bindings["Plant/Named"].function_name == "named_fn"

    # written back to the model
    ref = graph.get_function_packaging("Plant/Control Loop")
    assert ref.packaging == Packaging.NONREUSABLE
    assert ref.function_name == "Control_Loop"


def test_policy_override_wins(tmp_path: Path):
    policy = BuildPolicy(
        subsystems={
            "Named": {"function_name": "by_name"},
            "Plant/Control Loop": {"function_name": "by_path"},
        }
    )
    cfg = _build(tmp_path, policy)
    assert cfg.subsystem_bindings["Plant/Control Loop"].function_name == "by_path"
    assert cfg.subsystem_bindings["Plant/Named"].function_name == "by_name"


def test_fixed_policy_fields(tmp_path: Path):
    cfg = _build(tmp_path, BuildPolicy(fixed_step_size="0.01"))
    assert cfg.solver_mode == "FixedStep"
    assert cfg.fixed_step_size == "0.01"
    assert cfg.numeric_widening is True
    assert cfg.warnings == []
    assert cfg.output_directory == str(tmp_path / "build")
    assert "warnings" not in cfg.backend_payload()


def test_variable_step_is_refused(tmp_path: Path):
    with pytest.raises(SolverConfigurationError):
        _build(tmp_path, BuildPolicy(solver_mode="VariableStep"))


@pytest.mark.parametrize("step", ["0", "-0.01", "fast", "nan"])
def test_bad_fixed_step_size_is_refused(tmp_path: Path, step):
    with pytest.raises(SolverConfigurationError):
        _build(tmp_path, BuildPolicy(fixed_step_size=step))


def test_widening_degrades_to_warning_on_restrictive_target(tmp_path: Path):
    cfg = _build(tmp_path, BuildPolicy(target_device="Atmel->AVR", numeric_widening=True))

    assert cfg.numeric_widening is False
    assert len(cfg.warnings) == 1
    w = cfg.warnings[0]
    assert w.kind == "UnsupportedHardwareOption"
    assert w.is_warning
    assert "Atmel->AVR" in w.message


def test_widening_disabled_by_policy_is_not_a_warning(tmp_path: Path):
    cfg = _build(tmp_path, BuildPolicy(target_device="Atmel->AVR", numeric_widening=False))
    assert cfg.numeric_widening is False
    assert cfg.warnings == []


def test_unknown_target(tmp_path: Path):
    with pytest.raises(UnknownTargetDevice):
        _build(tmp_path, BuildPolicy(target_device="Nope->Nothing"))


@pytest.mark.parametrize("out", [".", "..", "sub/..", "/"])
def test_output_directory_must_not_be_project_root_or_above(tmp_path: Path, out):
    with pytest.raises(ConfigurationError):
        _build(tmp_path, BuildPolicy(output_directory=out))


@pytest.mark.parametrize("out", ["models", "dictionaries", "models/gen", "src"])
def test_output_directory_must_not_overlap_sources(tmp_path: Path, out):
    policy = BuildPolicy(output_directory=out, model_path=["models", "src/models", "."])
    with pytest.raises(ConfigurationError) as ei:
        _build(tmp_path, policy)
    assert ei.value.causes


def test_output_directory_inside_project_is_allowed(tmp_path: Path):
    cfg = _build(tmp_path, BuildPolicy(output_directory="out/gen"))
    assert cfg.output_directory == str(tmp_path / "out" / "gen")


def test_storage_layout():
    layout = compute_storage_layout(_table())

    assert [e.symbol for e in layout] == ["Cmd", "Level", "Threshold"]
    by_name = {e.symbol: e for e in layout}

    assert by_name["Threshold"].linkage == "define"
    assert by_name["Threshold"].storage_class == StorageClass.EXPORTED_GLOBAL
    assert by_name["Threshold"].value == 192

    lvl = by_name["Level"]
    assert lvl.linkage == "extern"
    assert lvl.pointer is True
    assert lvl.identifier == "bsp_level"
    assert lvl.value is None


def test_storage_layout_requires_resolved_classes():
    with pytest.raises(ValueError):
        compute_storage_layout(execute_dictionary("A = Parameter(1)\n"))


@pytest.mark.parametrize(
    "name,expected",
    [
        ("Controller", "Controller"),
        ("Control Loop", "Control_Loop"),
        ("  PID--v2 ", "PID_v2"),
        ("2nd Stage", "fcn_2nd_Stage"),
        ("???", ""),
        ("", ""),
    ],
)
def test_derive_function_name(name, expected):
    assert derive_function_name(name) == expected
