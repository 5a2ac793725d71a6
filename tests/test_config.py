from pathlib import Path

import pytest
from pydantic import ValidationError

from opmocks.config import GenerationConfig, load_generation_config


class TestGenerationConfig:
    def test_defaults(self) -> None:
        config = GenerationConfig()
        assert config.scalars == {}
        assert config.naming.add_operation_suffix is True
        assert config.max_depth == 5
        assert config.max_fragment_depth == 3
        assert config.split_interface_variants is False

    def test_aliases_and_field_names(self) -> None:
        by_alias = GenerationConfig.model_validate({"maxDepth": 2, "naming": {"addOperationSuffix": False}})
        by_name = GenerationConfig.model_validate({"max_depth": 2, "naming": {"add_operation_suffix": False}})
        assert by_alias == by_name

    def test_scalar_specs(self) -> None:
        config = GenerationConfig.model_validate(
            {
                "scalars": {
                    "Email": "email",
                    "Date": {"generator": "date", "arguments": "YYYY-MM-DD"},
                    "Amount": {"generator": "pyfloat", "arguments": [2, 2]},
                }
            }
        )
        assert config.scalars["Email"].generator == "email"
        assert config.scalars["Email"].positional_arguments == []
        assert config.scalars["Date"].positional_arguments == ["YYYY-MM-DD"]
        assert config.scalars["Amount"].positional_arguments == [2, 2]

    def test_unknown_keys_are_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GenerationConfig.model_validate({"maxDepht": 3})

    def test_negative_depth_is_rejected(self) -> None:
        with pytest.raises(ValidationError):
            GenerationConfig.model_validate({"maxDepth": -1})


class TestLoadGenerationConfig:
    def test_none_gives_defaults(self) -> None:
        assert load_generation_config(None) == GenerationConfig()

    def test_empty_file_gives_defaults(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("", encoding="utf-8")
        assert load_generation_config(config_file) == GenerationConfig()

    def test_loads_yaml(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text(
            "scalars:\n"
            "  Date:\n"
            "    generator: date\n"
            "    arguments: YYYY-MM-DD\n"
            "naming:\n"
            "  addOperationSuffix: false\n"
            "maxDepth: 3\n",
            encoding="utf-8",
        )
        config = load_generation_config(config_file)

        assert config.scalars["Date"].generator == "date"
        assert config.naming.add_operation_suffix is False
        assert config.max_depth == 3

    def test_non_mapping_root(self, tmp_path: Path) -> None:
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- scalars\n", encoding="utf-8")
        with pytest.raises(TypeError):
            load_generation_config(config_file)
