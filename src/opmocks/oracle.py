import re
import zlib
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from decimal import Decimal
from typing import Any
from uuid import UUID

from faker import Faker
from graphql import GraphQLEnumType, GraphQLScalarType, is_enum_type

from opmocks import log
from opmocks.config import ScalarGeneratorSpec
from opmocks.errors import ConfigurationError

# Providers whose first argument is a strftime pattern.
PATTERN_GENERATORS = {"date", "time"}

MOMENT_TOKENS = {
    "YYYY": "%Y",
    "YY": "%y",
    "MM": "%m",
    "DD": "%d",
    "HH": "%H",
    "mm": "%M",
    "ss": "%S",
}
MOMENT_TOKEN_PATTERN = re.compile("|".join(sorted(MOMENT_TOKENS, key=len, reverse=True)))


@dataclass(frozen=True)
class ScalarContext:
    owner_type_name: str
    field_name: str
    path: str


def to_strftime_pattern(pattern: str) -> str:
    """Translate a moment-style date pattern such as ``YYYY-MM-DD`` to strftime."""
    if "%" in pattern:
        return pattern
    return MOMENT_TOKEN_PATTERN.sub(lambda match: MOMENT_TOKENS[match.group(0)], pattern)


def to_json_value(value: Any) -> Any:
    """Convert a generated value to something JSON and TypeScript literals can hold."""
    if value is None or isinstance(value, str | bool | int | float):
        return value
    if isinstance(value, datetime | date | time):
        return value.isoformat()
    if isinstance(value, timedelta):
        return value.total_seconds()
    if isinstance(value, Decimal):
        return float(value)
    if isinstance(value, UUID):
        return str(value)
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    if isinstance(value, Mapping):
        return {str(key): to_json_value(item) for key, item in value.items()}
    if isinstance(value, list | tuple | set):
        return [to_json_value(item) for item in value]
    return str(value)


class ScalarValueOracle:
    """Produces deterministic sample values for scalar and enum fields.

    Custom scalars are generated through Faker providers named in the
    configuration. Every generator is checked when the oracle is created,
    so a bad configuration fails before any output is produced.
    """

    def __init__(self, scalars: Mapping[str, ScalarGeneratorSpec] | None = None):
        self.scalars = dict(scalars or {})
        self.faker = Faker()
        self._validate_generators()

    def _validate_generators(self) -> None:
        for scalar_name, spec in self.scalars.items():
            if not self._is_provider_method(spec.generator):
                raise ConfigurationError(f'Invalid generator "{spec.generator}" for scalar "{scalar_name}"')
        log.debug(f"Validated {len(self.scalars)} scalar generator(s)")

    def _is_provider_method(self, key: str) -> bool:
        if not key or key.startswith("_"):
            return False
        return any(callable(getattr(provider, key, None)) for provider in self.faker.get_providers())

    def value_for(self, named_type: GraphQLScalarType | GraphQLEnumType, context: ScalarContext) -> Any:
        """Return the sample value of a leaf field.

        Args:
            named_type: The unwrapped scalar or enum type of the field
            context: Where the field sits, used to seed the generator

        Returns:
            A JSON-compatible value
        """
        if is_enum_type(named_type):
            values = list(named_type.values)  # type: ignore[union-attr]
            return values[0] if values else None

        name = named_type.name
        self.faker.seed_instance(zlib.crc32(f"{name}:{context.owner_type_name}:{context.path}".encode()))

        if name in self.scalars:
            return self._generate(name, self.scalars[name])

        builtin_generators = {
            "ID": self.faker.uuid4,
            "String": self.faker.sentence,
            "Int": lambda: self.faker.random_int(min=0, max=1000),
            "Float": lambda: self.faker.pyfloat(left_digits=3, right_digits=2, positive=True),
            "Boolean": lambda: True,
        }
        if name in builtin_generators:
            return builtin_generators[name]()

        return f"{name.lower()}-mock"

    def _generate(self, scalar_name: str, spec: ScalarGeneratorSpec) -> Any:
        arguments: list[Any] = spec.positional_arguments
        if spec.generator in PATTERN_GENERATORS and arguments and isinstance(arguments[0], str):
            arguments = [to_strftime_pattern(arguments[0]), *arguments[1:]]

        generator = getattr(self.faker, spec.generator)
        try:
            value = generator(*arguments)
        except (TypeError, ValueError, AttributeError) as e:
            raise ConfigurationError(
                f'Invalid arguments {spec.arguments!r} for generator "{spec.generator}" of scalar "{scalar_name}"'
            ) from e
        return to_json_value(value)
