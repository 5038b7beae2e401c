from openapi_to_zod.emitter import Emitter, GenerationStats

HEADER = "// Auto-generated by openapi-to-zod\n// Do not edit this file manually\n"


class TestEmitter:
    def test_declarations_only(self):
        output = Emitter().render(declarations=["export const aSchema = z.string();", "export const bSchema = z.number();"])
        assert output == (
            HEADER + "\n"
            'import { z } from "zod";\n'
            "\n"
            "// Schemas and Types\n"
            "export const aSchema = z.string();\n"
            "\n"
            "export const bSchema = z.number();\n"
        )

    def test_enums_precede_schemas(self):
        output = Emitter().render(
            declarations=["export type Status = StatusEnum;"],
            enums=['export enum StatusEnum {\n\tActive = "active",\n}', 'export enum KindEnum {\n\tA = "a",\n}'],
            import_zod=False,
        )
        assert output == (
            HEADER + "\n"
            "// Native Enums\n"
            'export enum StatusEnum {\n\tActive = "active",\n}\n'
            "\n"
            'export enum KindEnum {\n\tA = "a",\n}\n'
            "\n"
            "// Schemas and Types\n"
            "export type Status = StatusEnum;\n"
        )

    def test_statistics_follow_the_header(self):
        stats = GenerationStats(total_schemas=2, filter_lines=["Operation Filtering:", "  Total operations: 1"])
        output = Emitter().render(declarations=[], stats=stats)
        assert output.startswith(
            HEADER + "\n"
            "// Generation Statistics:\n"
            "//   Total schemas: 2\n"
            "//   Circular references: 0\n"
            "//   Discriminated unions: 0\n"
            "//   With constraints: 0\n"
            "//   AllOf conflicts: 0\n"
            "//\n"
            "//   Operation Filtering:\n"
            "//     Total operations: 1\n"
            "\n"
            'import { z } from "zod";\n'
        )


def test_stats_from_fragments():
    stats = GenerationStats.from_fragments(
        {
            "Node": "export const nodeSchema = z.object({ next: z.lazy((): z.ZodTypeAny => nodeSchema) });",
            "Pet": 'export const petSchema = z.discriminatedUnion("kind", [catSchema, dogSchema]);',
            "Name": "export const nameSchema = z.string().min(1).max(10);",
            "Age": "export const ageSchema = z.number().gte(0);",
        },
        allof_conflicts=3,
    )
    assert stats.total_schemas == 4
    assert stats.circular_references == 1
    assert stats.discriminated_unions == 1
    assert stats.with_constraints == 2
    assert stats.allof_conflicts == 3
    assert stats.filter_lines == []
