"""Python structural patterns. Exports come from ``__all__`` or naming."""

from repo_map.queries.base import ExportRule, LanguageQueries, imp, q

QUERIES = LanguageQueries(
    language="python",
    export_rule=ExportRule.DUNDER_LIST,
    functions=(
        q("def $NAME($$$): $$$"),
        q("async def $NAME($$$): $$$"),
    ),
    classes=(
        q("class $NAME($$$): $$$"),
        q("class $NAME: $$$"),
    ),
    imports=(
        imp("import $SOURCE", "import", multi_source=True),
        imp("from $SOURCE import $NAME", "from"),
        imp("from $SOURCE import ($$$)", "from"),
    ),
    needs_content=True,
)
