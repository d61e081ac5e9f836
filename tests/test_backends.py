import json
import os
import sys
from pathlib import Path

import pytest

from smartbuild.core.config.models import BuildConfiguration, StorageLayoutEntry, SubsystemBinding
from smartbuild.core.errors import BackendBuildFailure
from smartbuild.core.execution.backends import BACKENDS, CommandBackend, LocalBackend, create_backend
from smartbuild.core.execution.sandbox import working_directory
from smartbuild.core.model.graph import Packaging
from smartbuild.core.model.yaml_graph import YamlModelGraph
from smartbuild.core.symbols.models import StorageClass, SymbolKind


def _entry(symbol, data_type, sc=StorageClass.EXPORTED_GLOBAL, value=None, kind=SymbolKind.PARAMETER, identifier=None):
    extern = sc == StorageClass.IMPORTED_EXTERN_POINTER
    return StorageLayoutEntry(
        symbol=symbol,
        identifier=identifier or symbol,
        kind=kind,
        data_type=data_type,
        storage_class=sc,
        linkage="extern" if extern else "define",
        pointer=extern,
        value=value,
    )


def _config(tmp_path: Path, **kw) -> BuildConfiguration:
    base = dict(
        model_name="Plant",
        target_device="ARM Compatible->ARM Cortex-M4",
        output_directory=str(tmp_path),
        subsystem_bindings={
            "Plant/Ctl": SubsystemBinding(subsystem_id="Plant/Ctl", packaging=Packaging.NONREUSABLE, function_name="ctl_step")
        },
        storage_layout=[
            _entry("Gain", "single", value=0.75),
            _entry("Level", "uint16", sc=StorageClass.IMPORTED_EXTERN_POINTER, kind=SymbolKind.SIGNAL, identifier="bsp_level"),
            _entry("Threshold", "int32", value=192),
        ],
    )
    base.update(kw)
    return BuildConfiguration(**base)


def _graph():
    return YamlModelGraph({"name": "Plant", "blocks": []})


def test_local_backend_writes_interface(tmp_path: Path):
    with working_directory(tmp_path):
        result = LocalBackend().generate(_config(tmp_path), _graph())

    assert result["artifacts"] == ["Plant_data.c", "Plant_data.h", "build_config.json", "manifest.json"]

    header = (tmp_path / "Plant_data.h").read_text(encoding="utf-8")
    assert "extern int32_t Threshold;" in header
    assert "extern uint16_t *bsp_level;" in header
    assert "void ctl_step(void);" in header

    source = (tmp_path / "Plant_data.c").read_text(encoding="utf-8")
    assert "int32_t Threshold = 192;" in source
    assert "float Gain = 0.75F;" in source
    # imported data is never defined
    assert "bsp_level" not in source

    payload = json.loads((tmp_path / "build_config.json").read_text(encoding="utf-8"))
    assert payload["solver_mode"] == "FixedStep"
    assert "warnings" not in payload


def test_local_backend_is_deterministic(tmp_path: Path):
    a, b = tmp_path / "a", tmp_path / "b"
    for d in (a, b):
        d.mkdir()
        with working_directory(d):
            LocalBackend().generate(_config(tmp_path), _graph())
    for name in ("Plant_data.h", "Plant_data.c", "build_config.json", "manifest.json"):
        assert (a / name).read_text(encoding="utf-8") == (b / name).read_text(encoding="utf-8")


def test_local_backend_rejects_wide_types_without_widening(tmp_path: Path):
    cfg = _config(
        tmp_path,
        target_device="Atmel->AVR",
        numeric_widening=False,
        storage_layout=[_entry("Big", "int64", value=1), _entry("Huge", "uint64", value=2)],
    )
    with working_directory(tmp_path):
        with pytest.raises(BackendBuildFailure) as ei:
            LocalBackend().generate(cfg, _graph())
    assert [c.split(":")[0] for c in ei.value.causes] == ["Big", "Huge"]


def test_create_backend():
    assert create_backend("local") is BACKENDS["local"]
    cmd = create_backend("command", command=["gen", "{config}"])
    assert isinstance(cmd, CommandBackend)
    assert cmd.command == ["gen", "{config}"]
    with pytest.raises(ValueError):
        create_backend("cloud")


def test_command_backend_success(tmp_path: Path):
    script = "import sys, pathlib; pathlib.Path(sys.argv[2] + '.c').write_text(open(sys.argv[1]).read())"
    backend = CommandBackend([sys.executable, "-c", script, "{config}", "{model}"])

    with working_directory(tmp_path):
        result = backend.generate(_config(tmp_path), _graph())

    assert "Plant.c" in result["artifacts"]
    assert "build_config.json" in result["artifacts"]
    assert result["meta"]["argv"][3] == str((tmp_path / "build_config.json").resolve())


def test_command_backend_failure_collects_error_lines(tmp_path: Path):
    script = (
        "import sys\n"
        "print('error: Controller: unresolved symbol Gain', file=sys.stderr)\n"
        "print('note: ignored')\n"
        "print('error: Filter: algebraic loop', file=sys.stderr)\n"
        "sys.exit(2)\n"
    )
    backend = CommandBackend([sys.executable, "-c", script])

    with working_directory(tmp_path):
        with pytest.raises(BackendBuildFailure) as ei:
            backend.generate(_config(tmp_path), _graph())

    assert "status 2" in ei.value.message
    assert ei.value.causes == ["Controller: unresolved symbol Gain", "Filter: algebraic loop"]


def test_command_backend_missing_executable(tmp_path: Path):
    backend = CommandBackend([os.path.join(str(tmp_path), "no-such-generator")])
    with working_directory(tmp_path):
        with pytest.raises(BackendBuildFailure) as ei:
            backend.generate(_config(tmp_path), _graph())
    assert ei.value.causes


def test_command_backend_requires_command(tmp_path: Path):
    with working_directory(tmp_path):
        with pytest.raises(BackendBuildFailure):
            CommandBackend([]).generate(_config(tmp_path), _graph())


def test_literal_expression_is_a_static_initializer(tmp_path: Path):
    cfg = _config(tmp_path, storage_layout=[_entry("Period", "double", value="1.0 / 50")])
    with working_directory(tmp_path):
        LocalBackend().generate(cfg, _graph())

    source = (tmp_path / "Plant_data.c").read_text(encoding="utf-8")
    assert "double Period = (1.0 / 50);" in source
    assert "initialize_parameters" not in source


def test_expression_referencing_symbols_is_assigned_at_startup(tmp_path: Path):
    cfg = _config(
        tmp_path,
        storage_layout=[
            _entry("Half", "int32", value="Threshold / 2"),
            _entry("Level", "uint16", sc=StorageClass.IMPORTED_EXTERN_POINTER, kind=SymbolKind.SIGNAL, identifier="bsp_level"),
            _entry("Margin", "int32", value="Half + Level"),
            _entry("Threshold", "int32", value=192),
        ],
    )
    with working_directory(tmp_path):
        LocalBackend().generate(cfg, _graph())

    header = (tmp_path / "Plant_data.h").read_text(encoding="utf-8")
    assert "extern int32_t Half;" in header
    assert "void Plant_initialize_parameters(void);" in header

    source = (tmp_path / "Plant_data.c").read_text(encoding="utf-8")
    assert "int32_t Half;" in source
    assert "int32_t Threshold = 192;" in source
    half = source.index("    Half = (Threshold / 2);")
    margin = source.index("    Margin = (Half + (*bsp_level));")
    assert half < margin


def test_circular_expressions_fail_the_build(tmp_path: Path):
    cfg = _config(
        tmp_path,
        storage_layout=[_entry("A", "int32", value="B + 1"), _entry("B", "int32", value="A - 1")],
    )
    with working_directory(tmp_path):
        with pytest.raises(BackendBuildFailure) as ei:
            LocalBackend().generate(cfg, _graph())
    assert ei.value.causes == ["A -> B -> A"]


def test_vectors_and_matrices_become_arrays(tmp_path: Path):
    cfg = _config(
        tmp_path,
        storage_layout=[
            _entry("Gains", "single", value=[[1, 2], [3, 4]]),
            _entry("Table", "int16", value=[1, 2, 3]),
        ],
    )
    with working_directory(tmp_path):
        LocalBackend().generate(cfg, _graph())

    header = (tmp_path / "Plant_data.h").read_text(encoding="utf-8")
    assert "extern int16_t Table[3];" in header
    assert "extern float Gains[2][2];" in header

    source = (tmp_path / "Plant_data.c").read_text(encoding="utf-8")
    assert "int16_t Table[3] = {1, 2, 3};" in source
    assert "float Gains[2][2] = {{1.0F, 2.0F}, {3.0F, 4.0F}};" in source


@pytest.mark.parametrize("value", [[], [[1, 2], [3]], {"a": 1}])
def test_unusable_values_name_the_symbol(tmp_path: Path, value):
    cfg = _config(tmp_path, storage_layout=[_entry("Bad", "int16", value=value)])
    with working_directory(tmp_path):
        with pytest.raises(BackendBuildFailure) as ei:
            LocalBackend().generate(cfg, _graph())
    assert ei.value.causes[0].startswith("Bad: ")
