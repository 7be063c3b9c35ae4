"""
tests/test_config.py
Tests for daogen.config: settings parsing, mapper factories, context building.
"""

from __future__ import annotations

import copy
import pathlib
from typing import Any, Dict

import pytest
from sqlalchemy.engine import Connection

from daogen.config import (
    ClassTarget,
    ClassTargetResolver,
    load_settings,
    parse_settings,
    with_schema,
)
from daogen.errors import ConfigurationError
from daogen.mapping import default_type_name_mapper


class TestParsing:
    def test_minimal_settings(self, settings_dict: Dict[str, Any]) -> None:
        settings = parse_settings(settings_dict)
        assert settings.database.driver == "sqlite"
        assert [t.name for t in settings.targets] == ["{class_name}", "{class_name}Dao"]
        assert settings.targets[1].output_directory == pathlib.Path("out/dao")

    def test_schema_alias(self, settings_dict: Dict[str, Any]) -> None:
        settings_dict["database"]["schema"] = "main"
        assert parse_settings(settings_dict).database.schema_name == "main"

    def test_extension_gets_a_dot(self, settings_dict: Dict[str, Any]) -> None:
        settings_dict["file_extension"] = "kt"
        assert parse_settings(settings_dict).file_extension == ".kt"

    def test_unknown_key_rejected(self, settings_dict: Dict[str, Any]) -> None:
        settings_dict["templates_dir"] = "oops"
        with pytest.raises(ConfigurationError):
            parse_settings(settings_dict)

    def test_classes_required(self, settings_dict: Dict[str, Any]) -> None:
        settings_dict["classes"] = []
        with pytest.raises(ConfigurationError):
            parse_settings(settings_dict)

    def test_bad_placeholder(self, settings_dict: Dict[str, Any]) -> None:
        settings_dict["classes"][0]["name"] = "{klass}Dao"
        with pytest.raises(ConfigurationError):
            parse_settings(settings_dict)

    def test_bad_regex(self, settings_dict: Dict[str, Any]) -> None:
        settings_dict["include_tables"] = ["(unclosed"]
        with pytest.raises(ConfigurationError):
            parse_settings(settings_dict)


class TestMappers:
    def test_table_filter(self, settings_dict: Dict[str, Any]) -> None:
        settings_dict["include_tables"] = ["^(users|orders|audit_log)$"]
        accept = parse_settings(settings_dict).table_name_filter()
        assert accept("users")
        assert not accept("audit_log")
        assert not accept("products")

    def test_empty_include_accepts_all(self, settings_dict: Dict[str, Any]) -> None:
        settings_dict["exclude_tables"] = []
        accept = parse_settings(settings_dict).table_name_filter()
        assert accept("anything")

    def test_type_map_overrides_builtin(self, settings_dict: Dict[str, Any]) -> None:
        settings_dict["type_map"] = {"VARCHAR": "Text", "GEOMETRY": "Shape"}
        mapper = parse_settings(settings_dict).type_name_mapper()
        assert mapper("VARCHAR") == "Text"
        assert mapper("GEOMETRY") == "Shape"
        assert mapper("INTEGER") == "int"
        assert mapper("INTERVAL") == "Any"

    def test_stock_type_mapper_without_overrides(self, settings_dict: Dict[str, Any]) -> None:
        assert parse_settings(settings_dict).type_name_mapper() is default_type_name_mapper

    def test_builtin_type_map_can_be_disabled(self, settings_dict: Dict[str, Any]) -> None:
        settings_dict["use_builtin_type_map"] = False
        settings_dict["default_type"] = None
        mapper = parse_settings(settings_dict).type_name_mapper()
        assert mapper("INTEGER") == "INTEGER"

    @pytest.mark.parametrize(
        "style, expected",
        [("camel", "createdAt"), ("snake", "created_at"), ("as_is", "CREATED_AT")],
    )
    def test_property_naming(self, settings_dict: Dict[str, Any], style: str, expected: str) -> None:
        settings_dict["property_naming"] = style
        mapper = parse_settings(settings_dict).property_name_mapper()
        assert mapper("CREATED_AT") == expected


class TestClassTargets:
    def test_fan_out_and_reverse_lookup(self) -> None:
        targets = [
            ClassTarget(name="{class_name}", template="entity.j2", output="m"),
            ClassTarget(name="{class_name}Dao", template="dao.j2", output="d"),
        ]
        resolver = ClassTargetResolver(targets)
        assert resolver.class_names("order_lines") == ["OrderLines", "OrderLinesDao"]
        assert resolver.target_for("OrderLinesDao").template == "dao.j2"
        assert resolver.target_for("OrderLines").template == "entity.j2"

    def test_produced_names_win_over_pattern_match(self) -> None:
        targets = [
            ClassTarget(name="{class_name}", template="entity.j2", output="m"),
            ClassTarget(name="{class_name}Dao", template="dao.j2", output="d"),
        ]
        resolver = ClassTargetResolver(targets)
        # table "user_dao" camelizes to a name that also looks like a DAO
        assert resolver.class_names("user_dao")[0] == "UserDao"
        assert resolver.target_for("UserDao").template == "entity.j2"

    def test_colliding_class_names_are_rejected(self) -> None:
        targets = [
            ClassTarget(name="{class_name}", template="entity.j2", output="m"),
            ClassTarget(name="{class_name}Dao", template="dao.j2", output="d"),
        ]
        resolver = ClassTargetResolver(targets)
        resolver.class_names("user_dao")
        with pytest.raises(ConfigurationError, match="UserDao"):
            resolver.class_names("user")

    def test_same_table_can_be_resolved_twice(self) -> None:
        resolver = ClassTargetResolver(
            [ClassTarget(name="{class_name}Dao", template="dao.j2", output="d")]
        )
        assert resolver.class_names("users") == ["UsersDao"]
        assert resolver.class_names("users") == ["UsersDao"]

    def test_upper_case_table_names(self) -> None:
        target = ClassTarget(name="{class_name}Dao", template="dao.j2", output="d")
        assert target.class_name_for("ORDER_LINES") == "OrderLinesDao"
        assert target.class_name_for("order_lines") == "OrderLinesDao"

    def test_unmatched_class_name(self) -> None:
        resolver = ClassTargetResolver(
            [ClassTarget(name="{class_name}Dao", template="dao.j2", output="d")]
        )
        with pytest.raises(ConfigurationError):
            resolver.target_for("User")

    def test_table_placeholder(self) -> None:
        target = ClassTarget(name="T_{table}", template="t.j2", output="o")
        assert target.class_name_for("users") == "T_users"


class TestLoading:
    def test_relative_paths_resolve_against_settings_file(
        self, settings_path: pathlib.Path, connection: Connection, tmp_path: pathlib.Path
    ) -> None:
        settings = load_settings(settings_path)
        ctx = settings.build_context(connection)

        assert ctx.template_directory == (tmp_path / "templates").resolve()
        assert ctx.class_name_mapper("users") == ["Users", "UsersDao"]
        assert ctx.template_name_mapper("UsersDao") == "dao.j2"
        assert ctx.output_directory_mapper("Users") == (tmp_path / "out" / "models").resolve()
        assert ctx.table_name_filter("audit_log") is False
        assert ctx.file_extension == ".py"

    def test_json_settings(
        self, settings_dict: Dict[str, Any], tmp_path: pathlib.Path
    ) -> None:
        import json

        path = tmp_path / "daogen.json"
        path.write_text(json.dumps(settings_dict), encoding="utf-8")
        assert load_settings(path).database.driver == "sqlite"

    def test_missing_file(self, tmp_path: pathlib.Path) -> None:
        with pytest.raises(ConfigurationError):
            load_settings(tmp_path / "nope.yaml")

    def test_not_a_mapping(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "list.yaml"
        path.write_text("- a\n- b\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_settings(path)

    def test_unparseable_yaml(self, tmp_path: pathlib.Path) -> None:
        path = tmp_path / "bad.yaml"
        path.write_text("database: [unclosed\n", encoding="utf-8")
        with pytest.raises(ConfigurationError):
            load_settings(path)

    def test_with_schema(self, settings_dict: Dict[str, Any]) -> None:
        settings = parse_settings(copy.deepcopy(settings_dict))
        assert with_schema(settings, None) is settings
        assert with_schema(settings, "main").database.schema_name == "main"
        assert settings.database.schema_name is None


class TestPassword:
    def test_inline_password(self, settings_dict: Dict[str, Any]) -> None:
        settings_dict["database"]["password"] = "pw"
        assert parse_settings(settings_dict).database.resolve_password() == "pw"

    def test_password_from_environment(
        self, settings_dict: Dict[str, Any], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("DAOGEN_TEST_PW", "from-env")
        settings_dict["database"]["password_env"] = "DAOGEN_TEST_PW"
        assert parse_settings(settings_dict).database.resolve_password() == "from-env"

    def test_unset_environment_variable(
        self, settings_dict: Dict[str, Any], monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("DAOGEN_TEST_PW", raising=False)
        settings_dict["database"]["password_env"] = "DAOGEN_TEST_PW"
        assert parse_settings(settings_dict).database.resolve_password() is None
