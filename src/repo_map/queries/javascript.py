"""JavaScript structural patterns."""

from repo_map.queries.base import (
    ExportRule,
    ExtractionMode,
    LanguageQueries,
    imp,
    q,
)

EXPORTS = (
    q("export function $NAME($$$) { $$$ }", "function"),
    q("export async function $NAME($$$) { $$$ }", "function"),
    q("export class $NAME { $$$ }", "class"),
    q("export const $NAME = $$$", "constant"),
    q("export let $NAME = $$$", "variable"),
    q("export var $NAME = $$$", "variable"),
    q("export default function $NAME($$$) { $$$ }", "function"),
    q("export default class $NAME { $$$ }", "class"),
    q("export default function ($$$) { $$$ }", "function", name_var=None, fallback_name="default"),
    q("export default class { $$$ }", "class", name_var=None, fallback_name="default"),
    q("export default $NAME", "value"),
    q("export { $$$ }", "value", name_var=None, mode=ExtractionMode.EXPORT_LIST),
    q(
        "export { $$$ } from $SOURCE", "re-export",
        name_var=None, mode=ExtractionMode.EXPORT_LIST, source_var="SOURCE",
    ),
    q("export * from $SOURCE", "re-export", name_var=None, fallback_name="*", source_var="SOURCE"),
    q("module.exports = $NAME", "value"),
    q("module.exports = { $$$ }", "value", name_var=None, mode=ExtractionMode.OBJECT_LITERAL),
    q("exports.$NAME = $$$", "value"),
)

FUNCTIONS = (
    q("function $NAME($$$) { $$$ }"),
    q("async function $NAME($$$) { $$$ }"),
    q("function* $NAME($$$) { $$$ }"),
    q("async function* $NAME($$$) { $$$ }"),
    q("const $NAME = ($$$) => $$$"),
    q("const $NAME = async ($$$) => $$$"),
    q("const $NAME = function ($$$) { $$$ }"),
    q("const $NAME = async function ($$$) { $$$ }"),
    q("let $NAME = ($$$) => $$$"),
    q("var $NAME = ($$$) => $$$"),
)

CLASSES = (
    q("class $NAME { $$$ }"),
    q("const $NAME = class { $$$ }"),
    q("const $NAME = class $CLASS { $$$ }"),
)

IMPORTS = (
    imp("import $NAME from $SOURCE", "default"),
    imp("import * as $NAME from $SOURCE", "namespace"),
    imp("import { $$$ } from $SOURCE", "named"),
    imp("import $SOURCE", "side-effect"),
    imp("const $NAME = require($SOURCE)", "require"),
    imp("const { $$$ } = require($SOURCE)", "require"),
    imp("require($SOURCE)", "require"),
)

QUERIES = LanguageQueries(
    language="javascript",
    export_rule=ExportRule.EXPLICIT_ONLY,
    exports=EXPORTS,
    functions=FUNCTIONS,
    classes=CLASSES,
    imports=IMPORTS,
)
