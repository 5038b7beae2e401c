import pytest

from openapi_to_zod.naming import (
    get_operation_name,
    method_name_from_path,
    numeric_to_enum_member,
    property_access,
    quote_property_name,
    schema_var_name,
    string_to_enum_member,
    strip_path_prefix,
    strip_schema_prefix,
    to_camel_case,
    to_pascal_case,
)


@pytest.mark.parametrize(
    "raw,expected",
    [
        ("user", "User"),
        ("userProfile", "UserProfile"),
        ("HTTPResponse", "HTTPResponse"),
        ("user-profile", "UserProfile"),
        ("user_profile", "UserProfile"),
        ("Company.Models.User", "CompanyModelsUser"),
        ("first name", "FirstName"),
        ("2fa_settings", "N2faSettings"),
    ],
    ids=["lower", "camel", "acronym", "kebab", "snake", "dotted", "spaced", "numeric_leading"],
)
def test_to_pascal_case(raw, expected):
    assert to_pascal_case(raw) == expected


class TestCamelCase:
    def test_plain(self):
        assert to_camel_case("User") == "user"
        assert to_camel_case("user-profile") == "userProfile"

    def test_prefix_and_suffix_are_recapitalized(self):
        assert to_camel_case("User", prefix="api") == "apiUser"
        assert to_camel_case("User", prefix="Api", suffix="dto") == "apiUserDto"

    def test_schema_var_name(self):
        assert schema_var_name("OrderItem") == "orderItemSchema"
        assert schema_var_name("OrderItem", prefix="v1") == "v1OrderItemSchema"


class TestEnumMembers:
    def test_collisions_get_incrementing_suffixes(self):
        used = set()
        keys = [string_to_enum_member(value, used) for value in ["foo_bar", "foo-bar", "foo bar"]]
        assert keys == ["FooBar", "FooBar2", "FooBar3"]

    def test_collisions_are_case_insensitive(self):
        used = set()
        assert string_to_enum_member("ACTIVE", used) == "Active"
        assert string_to_enum_member("active", used) == "Active2"

    @pytest.mark.parametrize(
        "value,expected",
        [("name", "Name"), ("-name", "NameDesc"), ("+name", "NameAsc"), ("-", "Desc"), ("", "Empty"), ("2nd", "Value2nd")],
        ids=["plain", "descending", "ascending", "bare_minus", "empty", "digit_leading"],
    )
    def test_string_keys(self, value, expected):
        assert string_to_enum_member(value) == expected

    def test_sort_sigils_do_not_collide_with_base(self):
        used = set()
        keys = [string_to_enum_member(value, used) for value in ["createdAt", "-createdAt", "+createdAt"]]
        assert keys == ["Createdat", "CreatedatDesc", "CreatedatAsc"]

    def test_numeric_keys(self):
        assert numeric_to_enum_member(5) == "Value5"
        assert numeric_to_enum_member(-5) == "ValueNeg5"
        assert numeric_to_enum_member(1.5, index=3) == "Value3"
        assert numeric_to_enum_member("+5") == "Value5Asc"


class TestPrefixStripping:
    def test_literal_prefix(self):
        assert strip_schema_prefix("ApiUser", "Api") == "User"

    def test_glob_prefix_from_list(self):
        assert strip_schema_prefix("Company.Api.User", ["Other.*", "Company.Api."]) == "User"

    def test_name_never_becomes_empty(self):
        assert strip_schema_prefix("Api", "Api") == "Api"

    def test_path_prefix_keeps_leading_slash(self):
        assert strip_path_prefix("/api/v1/users", "/api/v1") == "/users"
        assert strip_path_prefix("/api/v1/users", "api/v1/") == "/users"
        assert strip_path_prefix("/api/v1", "/api/v1") == "/"


class TestOperationNames:
    def test_operation_id_is_used(self):
        assert get_operation_name("listUsers", "get", "/users") == "ListUsers"
        assert get_operation_name("list-users", "get", "/users") == "ListUsers"

    def test_method_and_path_fallback(self):
        assert get_operation_name(None, "get", "/users/{id}") == "GetUsersById"
        assert get_operation_name("listUsers", "get", "/users/{id}", use_operation_id=False) == "GetUsersById"

    def test_path_segments_with_separators(self):
        assert method_name_from_path("post", "/user-groups/{group_id}/members") == "PostUserGroupsByGroupIdMembers"


def test_property_names_are_quoted_only_when_needed():
    assert quote_property_name("name") == "name"
    assert quote_property_name("content-type") == '"content-type"'
    assert property_access("name") == "obj.name"
    assert property_access("content-type") == 'obj["content-type"]'
