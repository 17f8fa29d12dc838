"""TypeScript structural patterns, layered on the JavaScript table."""

from repo_map.queries import javascript
from repo_map.queries.base import ExportRule, LanguageQueries, imp, q

QUERIES = LanguageQueries(
    language="typescript",
    export_rule=ExportRule.EXPLICIT_ONLY,
    exports=javascript.EXPORTS + (
        q("export interface $NAME { $$$ }", "type"),
        q("export type $NAME = $$$", "type"),
        q("export enum $NAME { $$$ }", "type"),
        q("export namespace $NAME { $$$ }", "type"),
        q("export const enum $NAME { $$$ }", "type"),
        q("export = $NAME", "value"),
        q("export as namespace $NAME", "namespace"),
    ),
    functions=javascript.FUNCTIONS,
    classes=javascript.CLASSES + (
        q("abstract class $NAME { $$$ }"),
    ),
    types=(
        q("interface $NAME { $$$ }"),
        q("type $NAME = $$$"),
        q("enum $NAME { $$$ }"),
        q("namespace $NAME { $$$ }"),
        q("const enum $NAME { $$$ }"),
    ),
    imports=javascript.IMPORTS + (
        imp("import type { $$$ } from $SOURCE", "type"),
        imp("import type $NAME from $SOURCE", "type"),
    ),
)
