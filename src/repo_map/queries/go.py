"""Go structural patterns. Exported names are capitalized."""

from repo_map.queries.base import ExportRule, LanguageQueries, imp, q

QUERIES = LanguageQueries(
    language="go",
    export_rule=ExportRule.CAPITALIZATION,
    functions=(
        q("func $NAME($$$) { $$$ }"),
        q("func ($$$) $NAME($$$) { $$$ }"),
    ),
    types=(
        q("type $NAME struct { $$$ }"),
        q("type $NAME interface { $$$ }"),
        q("type $NAME = $$$"),
    ),
    constants=(
        q("const $NAME = $$$"),
        q("const $NAME $TYPE = $$$"),
    ),
    imports=(
        imp("import $SOURCE", "import"),
        imp("import $NAME $SOURCE", "import"),
    ),
)
