import pytest
from conftest import build_session, compile_node

from openapi_to_zod.compiler import Scope
from openapi_to_zod.compiler.composition import order_by_mapping
from openapi_to_zod.compiler.strings import build_date_time_validation
from openapi_to_zod.errors import ConfigurationError, ReferenceResolutionError
from openapi_to_zod.usage_analyzer import SchemaContext


def ref(name):
    return {"$ref": f"#/components/schemas/{name}"}


class TestStrings:
    @pytest.mark.parametrize(
        "schema,expected",
        [
            ({"type": "string"}, "z.string()"),
            ({"type": "string", "format": "email", "minLength": 3}, "z.email().min(3)"),
            ({"type": "string", "format": "uuid"}, "z.uuid()"),
            ({"type": "string", "format": "date-time"}, "z.iso.datetime()"),
            ({"type": "string", "format": "date"}, "z.iso.date()"),
            ({"type": "string", "format": "unknown-format"}, "z.string()"),
            ({"type": "string", "pattern": "^a/b$", "maxLength": 10}, "z.string().max(10).regex(/^a\\/b$/)"),
            ({"type": "string", "contentEncoding": "base64", "minLength": 4}, "z.base64().min(4)"),
        ],
        ids=["plain", "email", "uuid", "date_time", "date", "unknown_format", "pattern", "encoding"],
    )
    def test_string_validators(self, session, schema, expected):
        assert compile_node(session, schema) == expected

    def test_media_type_adds_refinement(self, session):
        code = compile_node(session, {"type": "string", "contentMediaType": "application/json"})
        assert code.startswith("z.string().refine(")
        assert '"Must be valid JSON"' in code

    def test_encoding_takes_precedence_over_media_type(self, session):
        code = compile_node(session, {"type": "string", "contentEncoding": "base64", "contentMediaType": "application/json"})
        assert code == "z.base64()"

    def test_describe(self):
        session = build_session(use_describe=True)
        assert compile_node(session, {"type": "string", "description": 'Say "hi"'}) == 'z.string().describe("Say \\"hi\\"")'

    def test_patterns_are_cached(self, session):
        compile_node(session, {"type": "string", "pattern": "^x$"})
        assert session.pattern_cache.get("^x$") == "^x$"

    def test_custom_date_time_regex(self):
        assert build_date_time_validation("^\\d{4}$") == "z.string().regex(/^\\d{4}$/)"
        assert build_date_time_validation(None) == "z.iso.datetime()"
        with pytest.raises(ConfigurationError, match="Invalid regular expression"):
            build_date_time_validation("([")


class TestNumbers:
    @pytest.mark.parametrize(
        "schema,expected",
        [
            ({"type": "integer", "minimum": 0, "maximum": 10}, "z.number().int().gte(0).lte(10)"),
            ({"type": "number", "exclusiveMinimum": 0}, "z.number().gt(0)"),
            ({"type": "number", "minimum": 1, "exclusiveMinimum": True, "maximum": 5.0, "exclusiveMaximum": True}, "z.number().gt(1).lt(5)"),
            ({"type": "number", "multipleOf": 0.5}, "z.number().multipleOf(0.5)"),
        ],
        ids=["bounds", "numeric_exclusive", "flag_exclusive", "multiple_of"],
    )
    def test_number_validators(self, session, schema, expected):
        assert compile_node(session, schema) == expected

    def test_boolean(self, session):
        assert compile_node(session, {"type": "boolean"}) == "z.boolean()"


class TestArrays:
    def test_array_constraints(self, session):
        code = compile_node(session, {"type": "array", "items": {"type": "string"}, "minItems": 1, "maxItems": 3, "uniqueItems": True})
        assert code == 'z.array(z.string()).min(1).max(3).refine((items) => new Set(items).size === items.length, { message: "Array items must be unique" })'

    def test_array_without_items(self, session):
        assert compile_node(session, {"type": "array"}) == "z.array(z.unknown())"

    def test_contains(self, session):
        code = compile_node(session, {"type": "array", "items": {"type": "string"}, "contains": {"const": "x"}, "minContains": 2})
        assert 'z.literal("x").safeParse(item).success' in code
        assert "Array must contain at least 2 matching items" in code

    def test_tuple_with_rest(self, session):
        code = compile_node(session, {"type": "array", "prefixItems": [{"type": "string"}, {"type": "number"}], "items": {"type": "boolean"}})
        assert code == "z.tuple([z.string(), z.number()]).rest(z.boolean())"

    def test_closed_tuple(self, session):
        code = compile_node(session, {"type": "array", "prefixItems": [{"type": "string"}], "unevaluatedItems": False})
        assert code == 'z.tuple([z.string()]).refine((arr) => arr.length <= 1, { message: "Array must not have more than 1 items" })'


class TestObjects:
    def test_properties_and_required(self, session):
        schema = {"type": "object", "properties": {"id": {"type": "string"}, "age": {"type": "integer"}}, "required": ["id"]}
        assert compile_node(session, schema) == "z.object({\n\tid: z.string(),\n\tage: z.number().int().optional()\n})"

    @pytest.mark.parametrize("mode,constructor", [("strict", "z.strictObject"), ("normal", "z.object"), ("loose", "z.looseObject")], ids=["strict", "normal", "loose"])
    def test_mode_selects_constructor(self, mode, constructor):
        session = build_session(mode=mode)
        assert compile_node(session, {"type": "object", "properties": {"a": {"type": "string"}}}).startswith(f"{constructor}(")

    def test_additional_properties_false_is_always_strict(self):
        session = build_session(mode="loose")
        code = compile_node(session, {"type": "object", "properties": {"a": {"type": "string"}}, "additionalProperties": False})
        assert code.startswith("z.strictObject(")

    def test_typed_additional_properties(self, session):
        code = compile_node(session, {"type": "object", "properties": {"a": {"type": "string"}}, "additionalProperties": {"type": "number"}})
        assert code.endswith(".catchall(z.number())")

    @pytest.mark.parametrize(
        "behavior,expected",
        [("loose", "z.looseObject({})"), ("strict", "z.strictObject({})"), ("record", "z.record(z.string(), z.unknown())")],
        ids=["loose", "strict", "record"],
    )
    def test_empty_objects(self, behavior, expected):
        session = build_session(empty_object_behavior=behavior)
        assert compile_node(session, {"type": "object"}) == expected

    def test_quoted_property_names_and_jsdoc(self, session):
        schema = {"type": "object", "properties": {"content-type": {"type": "string", "description": "MIME type"}}}
        assert compile_node(session, schema) == 'z.object({\n\t/** MIME type */\n\t"content-type": z.string().optional()\n})'

    def test_undeclared_required_names(self, session):
        code = compile_node(session, {"type": "object", "properties": {"a": {"type": "string"}}, "required": ["a", "extra"]})
        assert ".catchall(z.unknown())" in code
        assert '.refine((obj) => obj.extra !== undefined, { message: "Missing required fields: extra" })' in code

    def test_property_count(self, session):
        code = compile_node(session, {"type": "object", "properties": {"a": {"type": "string"}}, "minProperties": 1})
        assert code.endswith('.refine((obj) => Object.keys(obj).length >= 1, { message: "Object must have at least 1 property" })')

    def test_pattern_properties_pass_unknown_keys_through(self, session):
        code = compile_node(session, {"type": "object", "patternProperties": {"^x-": {"type": "string"}}})
        assert code.startswith("z.object({}).catchall(z.unknown()).superRefine(")
        assert 'const patterns = ["^x-"];' in code

    def test_property_names(self, session):
        code = compile_node(session, {"type": "object", "properties": {"a": {}}, "propertyNames": {"pattern": "^[a-z]+$", "maxLength": 5}})
        assert "must match pattern '^[a-z]+$'" in code
        assert "must be at most 5 characters" in code

    def test_read_only_excluded_from_requests(self, session):
        schema = {"type": "object", "properties": {"id": {"type": "string", "readOnly": True}, "password": {"type": "string", "writeOnly": True}}}
        request = compile_node(session, schema, include=SchemaContext.REQUEST)
        response = compile_node(session, schema, include=SchemaContext.RESPONSE)
        both = compile_node(session, schema, include=None)
        assert "id:" not in request and "password:" in request
        assert "id:" in response and "password:" not in response
        assert "id:" in both and "password:" in both


class TestConditionals:
    def test_dependent_required(self, session):
        code = compile_node(session, {"type": "object", "properties": {"card": {}, "billing": {}}, "dependentRequired": {"card": ["billing"]}})
        assert "if (obj.card !== undefined && (obj.billing === undefined))" in code
        assert "When 'card' is present, billing must also be present" in code

    def test_schema_dependencies(self, session):
        schema = {"type": "object", "properties": {"a": {}}, "dependencies": {"a": {"required": ["b"]}}}
        code = compile_node(session, schema)
        assert "When 'a' is present, object must satisfy additional constraints" in code
        assert ".safeParse(obj)" in code

    def test_if_then_else(self, session):
        schema = {
            "type": "object",
            "properties": {"kind": {"type": "string"}, "size": {"type": "number"}},
            "if": {"properties": {"kind": {"const": "big"}}, "required": ["kind"]},
            "then": {"required": ["size"]},
        }
        code = compile_node(session, schema)
        assert 'if (obj.kind !== undefined && (obj.kind === undefined || (obj.kind === "big"))) {' in code
        assert '"size is required"' in code
        assert " else " not in code

    def test_if_without_branches_adds_nothing(self, session):
        assert compile_node(session, {"type": "object", "properties": {"a": {}}, "if": {"required": ["a"]}}) == "z.object({\n\ta: z.unknown().optional()\n})"


class TestNullable:
    def test_explicit_nullable(self, session):
        assert compile_node(session, {"type": "string", "nullable": True}) == "z.string().nullable()"
        assert compile_node(session, {"type": ["string", "null"]}) == "z.string().nullable()"

    def test_multiple_types(self, session):
        assert compile_node(session, {"type": ["string", "number"]}) == "z.union([z.string(), z.number()])"
        assert compile_node(session, {"type": ["string", "number", "null"]}) == "z.union([z.string(), z.number()]).nullable()"

    def test_composite_members_ignore_default_nullable(self):
        session = build_session(default_nullable=True)
        assert compile_node(session, {"type": ["string", "integer"]}) == "z.union([z.string(), z.number().int()])"
        assert compile_node(session, {"anyOf": [{"type": "string"}, {"type": "boolean"}]}) == "z.union([z.string(), z.boolean()])"
        scope = Scope(owner=None, options=session.request_options, top_level=True)
        nested = scope.nested(suppress_default_nullable=True)
        assert nested.suppress_default_nullable is True
        assert nested.top_level is False

    def test_default_nullable_applies_without_explicit_signal(self):
        session = build_session(default_nullable=True)
        assert compile_node(session, {"type": "string"}) == "z.string().nullable()"
        assert compile_node(session, {"type": "string", "nullable": False}) == "z.string()"

    def test_default_nullable_skips_top_level_and_composites(self):
        session = build_session(default_nullable=True)
        assert compile_node(session, {"type": "string"}, top_level=True) == "z.string()"
        assert compile_node(session, {"enum": ["a"]}) == 'z.enum(["a"])'
        assert compile_node(session, {"const": 1}) == "z.literal(1)"

    def test_null_in_enum(self, session):
        assert compile_node(session, {"type": "string", "enum": ["a", None]}) == 'z.enum(["a"]).nullable()'


class TestEnumsAndConst:
    @pytest.mark.parametrize(
        "values,expected",
        [
            (["a", "b"], 'z.enum(["a", "b"])'),
            ([1, 2], "z.union([z.literal(1), z.literal(2)])"),
            ([True, False], "z.boolean()"),
            ([3], "z.literal(3)"),
            (["a", 1], 'z.union([z.literal("a"), z.literal(1)])'),
        ],
        ids=["strings", "numbers", "booleans", "single", "mixed"],
    )
    def test_enum(self, session, values, expected):
        assert compile_node(session, {"enum": values}) == expected

    def test_const(self, session):
        assert compile_node(session, {"const": "x"}) == 'z.literal("x")'
        assert compile_node(session, {"const": None}) == "z.null()"
        assert "JSON.stringify" in compile_node(session, {"const": {"a": 1}})


class TestReferences:
    def test_reference_to_named_schema(self):
        session = build_session({"User": {"type": "object"}, "Post": {"type": "object"}})
        assert compile_node(session, ref("User"), owner="Post") == "userSchema"
        assert session.dependencies == {"Post": ["User"]}

    def test_self_reference_is_deferred(self):
        session = build_session({"Node": {"type": "object", "properties": {"next": ref("Node")}}})
        assert compile_node(session, ref("Node"), owner="Node") == "z.lazy((): z.ZodTypeAny => nodeSchema)"
        assert session.dependencies == {}

    def test_mutual_references_are_deferred(self):
        session = build_session({"A": {"properties": {"b": ref("B")}}, "B": {"properties": {"a": ref("A")}}})
        assert compile_node(session, ref("B"), owner="A") == "z.lazy((): z.ZodTypeAny => bSchema)"
        assert compile_node(session, ref("A"), owner="B") == "z.lazy((): z.ZodTypeAny => aSchema)"

    def test_aliases_resolve_to_target(self):
        session = build_session({"Alias": ref("User"), "User": {"type": "object"}, "Post": {"type": "object"}})
        assert compile_node(session, ref("Alias"), owner="Post") == "userSchema"
        assert session.dependencies == {"Post": ["User"]}

    def test_prefix_and_suffix(self):
        session = build_session({"User": {"type": "object"}}, prefix="api", suffix="dto")
        assert compile_node(session, ref("User"), owner="Other") == "apiUserDtoSchema"

    def test_unknown_reference(self, session):
        with pytest.raises(ReferenceResolutionError, match="points to non-existent schema 'Missing'"):
            compile_node(session, ref("Missing"), owner="X")


class TestComposition:
    SCHEMAS = {
        "Animal": {"type": "object", "properties": {"name": {"type": "string"}}},
        "Pet": {"type": "object", "properties": {"owner": {"type": "string"}}},
        "Cat": {"type": "object", "properties": {"petType": {"const": "cat"}}},
        "Dog": {"type": "object", "properties": {"petType": {"const": "dog"}}},
        "Tagged": {"type": "object", "properties": {"id": {"type": "string"}}},
        "Numbered": {"type": "object", "properties": {"id": {"type": "integer"}}},
    }

    def test_all_of_references_extend(self):
        session = build_session(self.SCHEMAS)
        code = compile_node(session, {"allOf": [ref("Animal"), ref("Pet")]}, owner="X", top_level=True)
        assert code == "animalSchema.extend(petSchema.shape)"

    def test_all_of_inline_object_extends_with_shape(self):
        session = build_session(self.SCHEMAS)
        code = compile_node(session, {"allOf": [ref("Animal"), {"type": "object", "properties": {"bark": {"type": "boolean"}}}]}, owner="X")
        assert code == "animalSchema.extend({\n\tbark: z.boolean().optional()\n})"

    def test_all_of_non_objects_intersect(self):
        session = build_session(self.SCHEMAS)
        assert compile_node(session, {"allOf": [ref("Animal"), {"type": "string"}]}, owner="X") == "animalSchema.and(z.string())"

    def test_single_member_all_of_passes_through(self):
        session = build_session(self.SCHEMAS)
        assert compile_node(session, {"allOf": [ref("Animal")]}, owner="X") == "animalSchema"

    def test_all_of_conflicts_are_recorded(self, caplog):
        session = build_session(self.SCHEMAS)
        compile_node(session, {"allOf": [ref("Tagged"), ref("Numbered")]}, owner="Both")
        assert session.allof_conflicts == {"Both": ["Property 'id' has conflicting types: string vs integer"]}
        assert "conflicting types" in caplog.text

    def test_discriminated_union(self):
        session = build_session(self.SCHEMAS)
        code = compile_node(session, {"oneOf": [ref("Cat"), ref("Dog")], "discriminator": {"propertyName": "petType"}}, owner="X")
        assert code == 'z.discriminatedUnion("petType", [catSchema, dogSchema])'

    def test_discriminator_mapping_orders_members(self):
        session = build_session(self.SCHEMAS)
        schema = {
            "oneOf": [ref("Cat"), ref("Dog")],
            "discriminator": {"propertyName": "petType", "mapping": {"dog": "#/components/schemas/Dog", "cat": "#/components/schemas/Cat"}},
        }
        assert compile_node(session, schema, owner="X") == 'z.discriminatedUnion("petType", [dogSchema, catSchema])'

    def test_mapping_matches_whole_schema_names(self):
        bobcat, cat = ref("BobCat"), ref("Cat")
        assert order_by_mapping([bobcat, cat], {"cat": "Cat", "bobcat": "#/components/schemas/BobCat"}) == [cat, bobcat]
        assert order_by_mapping([cat], {"dog": "Dog", "cat": "Cat"}) == [{"$ref": "Dog"}, cat]

    def test_any_of(self, session):
        assert compile_node(session, {"anyOf": [{"type": "string"}, {"type": "number"}]}) == "z.union([z.string(), z.number()])"

    def test_not(self, session):
        code = compile_node(session, {"not": {"type": "string"}})
        assert code == 'z.unknown().refine((val) => !z.string().safeParse(val).success, { message: "Value must not match the excluded schema" })'

    def test_unevaluated_properties_false(self):
        session = build_session(self.SCHEMAS)
        code = compile_node(session, {"allOf": [ref("Animal"), ref("Pet")], "unevaluatedProperties": False}, owner="X")
        assert code.startswith("animalSchema.extend(petSchema.shape).catchall(z.unknown()).refine(")
        assert 'new Set(["name", "owner"])' in code
        assert "No unevaluated properties allowed" in code

    def test_unevaluated_properties_on_union_opens_branches(self):
        session = build_session(self.SCHEMAS)
        code = compile_node(session, {"oneOf": [ref("Cat"), ref("Dog")], "unevaluatedProperties": False}, owner="X")
        assert code.startswith("z.union([catSchema.catchall(z.unknown()), dogSchema.catchall(z.unknown())])")
