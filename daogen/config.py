# File: daogen/config.py
"""
DaoGen - Settings
==================
Pydantic V2 models for the settings file, and the code that turns them into
a ``GenerationContext``.

Example ``daogen.yaml``::

    database:
      driver: postgresql+psycopg2
      url: postgresql://localhost:5432/app
      user: app
      password_env: APP_DB_PASSWORD
      schema: public
    template_directory: templates
    file_extension: .py
    include_tables: ["^app_"]
    exclude_tables: ["_audit$"]
    type_map: {JSONB: "dict[str, Any]"}
    property_naming: snake
    classes:
      - name: "{class_name}"
        template: model.py.j2
        output: src/app/models
      - name: "{class_name}Dao"
        template: dao.py.j2
        output: src/app/dao

Relative paths are resolved against the directory holding the settings file.
"""

from __future__ import annotations

import json
import logging
import os
import re
import string
from pathlib import Path
from typing import Any, Dict, List, Literal, Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from sqlalchemy.engine import Connection

from daogen.errors import ConfigurationError
from daogen.exporters import DEFAULT_FILE_EXTENSION
from daogen.generator import GenerationContext
from daogen.mapping import (
    PYTHON_TYPE_NAMES,
    PropertyNameMapper,
    TableNameFilter,
    TypeNameMap,
    default_class_name_mapper,
    default_property_name_mapper,
    default_type_name_mapper,
)
from daogen.utils import to_snake_case

logger: logging.Logger = logging.getLogger("daogen.config")

_SETTINGS_CONFIG: ConfigDict = ConfigDict(
    populate_by_name=True,
    extra="forbid",
    frozen=True,
)

_PATTERN_FIELDS: frozenset = frozenset({"class_name", "table"})


# ---------------------------------------------------------------------------
# Settings models
# ---------------------------------------------------------------------------


class DatabaseSettings(BaseModel):
    """Where and how to connect."""

    model_config = _SETTINGS_CONFIG

    driver: Optional[str] = Field(
        default=None, description="SQLAlchemy dialect[+driver]; overrides the URL's."
    )
    url: str = Field(..., min_length=1, description="Database URL.")
    user: Optional[str] = None
    password: Optional[str] = None
    password_env: Optional[str] = Field(
        default=None, description="Environment variable holding the password."
    )
    schema_name: Optional[str] = Field(default=None, alias="schema")

    def resolve_password(self) -> Optional[str]:
        if self.password is not None:
            return self.password
        if self.password_env:
            value: Optional[str] = os.environ.get(self.password_env)
            if value is None:
                logger.warning(
                    "Password variable %s is not set; connecting without a password.",
                    self.password_env,
                )
            return value
        return None


class ClassTarget(BaseModel):
    """One generated class per table: its name pattern, template and output dir."""

    model_config = _SETTINGS_CONFIG

    name: str = Field(
        default="{class_name}",
        min_length=1,
        description="Pattern with {class_name} (camelized table) and/or {table}.",
    )
    template: str = Field(..., min_length=1, description="Template name.")
    output_directory: Path = Field(..., alias="output")

    @field_validator("name")
    @classmethod
    def _check_placeholders(cls, v: str) -> str:
        fields: List[str] = [f for _, f, _, _ in string.Formatter().parse(v) if f is not None]
        unknown: List[str] = [f for f in fields if f not in _PATTERN_FIELDS]
        if unknown:
            raise ValueError(
                f"Unknown placeholder(s) {unknown} in class name pattern {v!r}; "
                f"allowed: {sorted(_PATTERN_FIELDS)}."
            )
        if not fields:
            raise ValueError(f"Class name pattern {v!r} has no placeholder.")
        return v

    def class_name_for(self, table_name: str) -> str:
        (class_name,) = default_class_name_mapper(table_name)
        return self.name.format(class_name=class_name, table=table_name)

    @property
    def literal_length(self) -> int:
        return sum(len(literal) for literal, _, _, _ in string.Formatter().parse(self.name))

    def matcher(self) -> re.Pattern[str]:
        parts: List[str] = []
        for literal, field_name, _, _ in string.Formatter().parse(self.name):
            parts.append(re.escape(literal))
            if field_name is not None:
                parts.append(r".+")
        return re.compile("".join(parts))


class GeneratorSettings(BaseModel):
    """Top-level settings file model."""

    model_config = _SETTINGS_CONFIG

    database: DatabaseSettings
    template_directory: Path = Path("templates")
    file_extension: str = DEFAULT_FILE_EXTENSION
    include_tables: List[str] = Field(
        default_factory=list, description="Regexes; empty accepts every table."
    )
    exclude_tables: List[str] = Field(default_factory=list, description="Regexes.")
    type_map: Dict[str, str] = Field(default_factory=dict)
    use_builtin_type_map: bool = True
    default_type: Optional[str] = "Any"
    property_naming: Literal["camel", "snake", "as_is"] = "camel"
    targets: List[ClassTarget] = Field(..., alias="classes", min_length=1)
    base_directory: Path = Field(
        default=Path("."), description="Anchor for relative paths; set by the loader."
    )

    @field_validator("include_tables", "exclude_tables")
    @classmethod
    def _check_regexes(cls, v: List[str]) -> List[str]:
        for pattern in v:
            try:
                re.compile(pattern)
            except re.error as exc:
                raise ValueError(f"Invalid table pattern {pattern!r}: {exc}") from exc
        return v

    @field_validator("file_extension")
    @classmethod
    def _check_extension(cls, v: str) -> str:
        if v and not v.startswith("."):
            return "." + v
        return v

    # -- Mapper factories ---------------------------------------------------

    def resolve_path(self, path: Path) -> Path:
        return path if path.is_absolute() else (self.base_directory / path).resolve()

    def table_name_filter(self) -> TableNameFilter:
        include: Tuple[re.Pattern[str], ...] = tuple(re.compile(p) for p in self.include_tables)
        exclude: Tuple[re.Pattern[str], ...] = tuple(re.compile(p) for p in self.exclude_tables)

        def accept(table_name: str) -> bool:
            if include and not any(p.search(table_name) for p in include):
                return False
            return not any(p.search(table_name) for p in exclude)

        return accept

    def type_name_mapper(self) -> TypeNameMap:
        if (
            self.use_builtin_type_map
            and not self.type_map
            and self.default_type == default_type_name_mapper.default
        ):
            return default_type_name_mapper
        mapping: Dict[str, str] = dict(PYTHON_TYPE_NAMES) if self.use_builtin_type_map else {}
        mapping.update(self.type_map)
        return TypeNameMap(mapping, default=self.default_type)

    def property_name_mapper(self) -> PropertyNameMapper:
        if self.property_naming == "snake":
            return to_snake_case
        if self.property_naming == "camel":
            return default_property_name_mapper
        return str

    def build_context(self, connection: Connection) -> GenerationContext:
        """Assemble the context for one generation request on *connection*."""
        resolver: ClassTargetResolver = ClassTargetResolver(self.targets)
        return GenerationContext(
            connection=connection,
            class_name_mapper=resolver.class_names,
            type_name_mapper=self.type_name_mapper(),
            property_name_mapper=self.property_name_mapper(),
            table_name_filter=self.table_name_filter(),
            template_directory=self.resolve_path(self.template_directory),
            template_name_mapper=lambda class_name: resolver.target_for(class_name).template,
            output_directory_mapper=lambda class_name: self.resolve_path(
                resolver.target_for(class_name).output_directory
            ),
            schema_name=self.database.schema_name,
            file_extension=self.file_extension,
        )


class ClassTargetResolver:
    """
    Fans a table out to class names and maps each class name back to its target.

    Names produced by ``class_names`` are remembered; any other name falls back
    to the matching target whose pattern has the most literal characters. A
    name produced for two different (target, table) pairs is a configuration
    error.
    """

    def __init__(self, targets: List[ClassTarget]) -> None:
        self._targets: List[ClassTarget] = list(targets)
        self._ranked: List[Tuple[re.Pattern[str], ClassTarget]] = [
            (t.matcher(), t)
            for t in sorted(self._targets, key=lambda t: t.literal_length, reverse=True)
        ]
        self._produced: Dict[str, Tuple[ClassTarget, str]] = {}

    def class_names(self, table_name: str) -> List[str]:
        names: List[str] = []
        for target in self._targets:
            class_name: str = target.class_name_for(table_name)
            owner: Tuple[ClassTarget, str] = self._produced.setdefault(
                class_name, (target, table_name)
            )
            if owner[0] is not target or owner[1] != table_name:
                raise ConfigurationError(
                    f"Class name {class_name!r} is produced by pattern {target.name!r} "
                    f"for table {table_name!r} and by pattern {owner[0].name!r} "
                    f"for table {owner[1]!r}."
                )
            names.append(class_name)
        return names

    def target_for(self, class_name: str) -> ClassTarget:
        owner: Optional[Tuple[ClassTarget, str]] = self._produced.get(class_name)
        if owner is not None:
            return owner[0]
        for matcher, candidate in self._ranked:
            if matcher.fullmatch(class_name):
                return candidate
        raise ConfigurationError(f"No class target matches class name {class_name!r}.")


# ---------------------------------------------------------------------------
# Loading
# ---------------------------------------------------------------------------


def _read_raw(path: Path) -> Dict[str, Any]:
    try:
        text: str = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read settings file {path}: {exc}") from exc

    try:
        if path.suffix.lower() == ".json":
            data: Any = json.loads(text)
        else:
            data = yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as exc:
        raise ConfigurationError(f"Cannot parse settings file {path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigurationError(
            f"Expected a mapping at the top of {path}, got {type(data).__name__}."
        )
    return data


def parse_settings(raw: Dict[str, Any], base_directory: Optional[Path] = None) -> GeneratorSettings:
    """Validate a raw settings mapping."""
    data: Dict[str, Any] = dict(raw)
    if base_directory is not None:
        data["base_directory"] = base_directory
    try:
        return GeneratorSettings.model_validate(data)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid settings: {exc}") from exc


def load_settings(path: Path) -> GeneratorSettings:
    """Load a YAML or JSON settings file."""
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(f"Settings file not found: {path}")
    settings: GeneratorSettings = parse_settings(_read_raw(path), path.resolve().parent)
    logger.info(
        "Loaded settings from %s: %d class target(s).", path, len(settings.targets)
    )
    return settings


def with_schema(settings: GeneratorSettings, schema_name: Optional[str]) -> GeneratorSettings:
    """Return *settings* with the database schema replaced (None keeps it)."""
    if schema_name is None:
        return settings
    database: DatabaseSettings = settings.database.model_copy(
        update={"schema_name": schema_name}
    )
    return settings.model_copy(update={"database": database})


__all__: List[str] = [
    "DatabaseSettings",
    "ClassTarget",
    "GeneratorSettings",
    "ClassTargetResolver",
    "parse_settings",
    "load_settings",
    "with_schema",
]
