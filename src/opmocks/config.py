from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator

from opmocks import log

ScalarArgument = str | int | float | bool


class ScalarGeneratorSpec(BaseModel):
    """A Faker provider call used to produce values for a custom scalar.

    ``arguments`` is either a single value passed positionally, or a list
    spread as positional arguments.
    """

    model_config = ConfigDict(extra="forbid")

    generator: str
    arguments: ScalarArgument | list[ScalarArgument] | None = None

    @property
    def positional_arguments(self) -> list[ScalarArgument]:
        if self.arguments is None:
            return []
        if isinstance(self.arguments, list):
            return list(self.arguments)
        return [self.arguments]


class NamingOptions(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    add_operation_suffix: bool = Field(True, alias="addOperationSuffix")


class GenerationConfig(BaseModel):
    """Options for a generation run."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    scalars: dict[str, ScalarGeneratorSpec] = Field(default_factory=dict)
    naming: NamingOptions = Field(default_factory=NamingOptions)
    max_depth: int = Field(5, alias="maxDepth", ge=0)
    max_fragment_depth: int = Field(3, alias="maxFragmentDepth", ge=1)
    split_interface_variants: bool = Field(False, alias="splitInterfaceVariants")

    @field_validator("scalars", mode="before")
    @classmethod
    def expand_shorthand_generators(cls, scalars: Any) -> Any:
        """Accept ``Email: email`` as shorthand for ``Email: {generator: email}``."""
        if not isinstance(scalars, dict):
            return scalars
        return {
            name: {"generator": spec} if isinstance(spec, str) else spec
            for name, spec in scalars.items()
        }


def load_generation_config(config_path: Path | None) -> GenerationConfig:
    """Load the generation configuration from a YAML file.

    Args:
        config_path: Path to the YAML file, or None for the defaults

    Returns:
        The validated configuration

    Raises:
        TypeError: If the YAML root is not a mapping
        pydantic.ValidationError: If the configuration has unknown or invalid keys
    """
    if config_path is None:
        return GenerationConfig()

    with open(config_path, encoding="utf-8") as file:
        raw_config = yaml.safe_load(file)

    if not raw_config:
        log.debug(f"Configuration file {config_path} is empty, using defaults")
        return GenerationConfig()

    if not isinstance(raw_config, dict):
        raise TypeError(f"Configuration root must be a mapping, got {type(raw_config).__name__}")

    config = GenerationConfig.model_validate(raw_config)
    log.debug(f"Loaded configuration from {config_path}: {config.model_dump(by_alias=True)}")
    return config
